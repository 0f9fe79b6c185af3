from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from lms.deps import get_db, get_payment_gateway
from lms.auth.dependencies import require_capability
from lms.auth.permissions import Capability
from lms.services import payment_service
from lms.services.stripe_gateway import StripePaymentGateway
from lms.schemas.order_schema import OrderCreate, OrderCapture, OrderOut, OrderCreatedOut

router = APIRouter(prefix="/student/order", tags=["orders"])

purchase_courses = require_capability(Capability.PURCHASE_COURSES)

@router.post("", response_model=OrderCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate,
                       db: Database = Depends(get_db),
                       gateway: StripePaymentGateway = Depends(get_payment_gateway),
                       user=Depends(purchase_courses)):
    """
    Open a payment for a published course and record a pending order. The
    returned ``client_secret`` lets the front end complete the payment.
    """
    return await payment_service.create_order(db, gateway, user, payload.course_id)

@router.post("/capture", response_model=OrderOut)
async def capture_order(payload: OrderCapture,
                        db: Database = Depends(get_db),
                        gateway: StripePaymentGateway = Depends(get_payment_gateway),
                        user=Depends(purchase_courses)):
    """
    Confirm a pending order against the provider's payment. Safe to retry:
    a completed order is returned as is and the student is enrolled once.
    """
    return await payment_service.capture_order(db, gateway, user, payload.order_id, payload.payment_id)

@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, db: Database = Depends(get_db), user=Depends(purchase_courses)):
    return await payment_service.get_student_order(db, user, order_id)
