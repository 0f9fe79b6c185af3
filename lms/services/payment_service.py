# services/payment_service.py
"""
Order lifecycle on top of the payment provider.

An order is opened ``pending`` together with a provider payment and moves
once, to ``completed`` or ``failed``, when the student confirms it. A
completed order enrolls the student in the course. Enrollment is an
idempotent append, so re-running it for the same order is harmless; the
scheduled ``reconcile_enrollments`` job re-runs it for completed orders
whose enrollment never got recorded.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from lms.config import settings
from lms.errors import ConflictError, NotFoundError, ValidationError
from lms.repos import courses as course_repo
from lms.repos import orders as repo
from lms.services.stripe_gateway import StripePaymentGateway, to_minor_units

logger = logging.getLogger(__name__)

PAYMENT_METHOD = "stripe"

# PaymentIntent statuses that may still turn into a capture; the order stays pending
IN_FLIGHT_STATUSES = (
    "requires_payment_method",
    "requires_confirmation",
    "requires_action",
    "processing",
    "requires_capture",
)

async def create_order(db: Database, gateway: StripePaymentGateway, student: Dict[str, Any], course_id: str) -> Dict[str, Any]:
    course = await run_in_threadpool(course_repo.get_published_course, db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    if await run_in_threadpool(course_repo.is_student_enrolled, db, course_id, student["_id"]):
        raise ConflictError("Course already purchased")

    amount = float(course.get("pricing", 0.0))
    currency = settings.PAYMENT_CURRENCY
    payment = await run_in_threadpool(
        gateway.create_payment, amount, currency,
        {"course_id": course_id, "student_id": student["_id"]},
        course["title"],
    )

    order = await run_in_threadpool(repo.insert_order, db, {
        "course_id": course_id,
        "course_title": course["title"],
        "course_image": course.get("image"),
        "student_id": student["_id"],
        "student_name": student["user_name"],
        "student_email": student["user_email"],
        "instructor_id": course["instructor_id"],
        "instructor_name": course["instructor_name"],
        "amount": amount,
        "currency": currency,
        "payment_method": PAYMENT_METHOD,
        "external_payment_id": payment["id"],
    })
    logger.info(f"Order {order['_id']} opened for course {course_id} by student {student['_id']} ({payment['id']})")
    return {"order": order, "client_secret": payment.get("client_secret")}

async def get_student_order(db: Database, student: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    order = await run_in_threadpool(repo.get_order, db, order_id)
    if not order or order["student_id"] != student["_id"]:
        raise NotFoundError("Order not found")
    return order

def _apply_enrollment(db: Database, order: Dict[str, Any]) -> Optional[bool]:
    """
    Blocking. Append the order's student to the course once and mark the order.

    Returns the result of ``add_student``. When the course is gone the order
    stays unapplied so it keeps showing up for reconciliation.
    """
    appended = course_repo.add_student(db, order["course_id"], {
        "student_id": order["student_id"],
        "student_name": order["student_name"],
        "student_email": order["student_email"],
        "paid_amount": order["amount"],
        "enrolled_at": order.get("completed_at") or datetime.now(timezone.utc),
    })
    if appended is None:
        logger.error(f"Order {order['_id']} is completed but course {order['course_id']} no longer exists; enrollment not applied")
        return None
    repo.mark_enrollment_applied(db, order["_id"])
    return appended

async def capture_order(db: Database, gateway: StripePaymentGateway, student: Dict[str, Any],
                        order_id: str, payment_id: str) -> Dict[str, Any]:
    order = await get_student_order(db, student, order_id)
    if payment_id != order["external_payment_id"]:
        raise ValidationError("Payment does not belong to this order")

    if order["status"] == repo.FAILED:
        raise ConflictError(f"Order {order_id} has failed and cannot be confirmed")

    if order["status"] == repo.COMPLETED:
        # retried confirmation: make sure enrollment happened, change nothing else
        await run_in_threadpool(_apply_enrollment, db, order)
        return await run_in_threadpool(repo.get_order, db, order_id)

    payment = await run_in_threadpool(gateway.retrieve_payment, payment_id)
    expected = to_minor_units(order["amount"], order["currency"])

    if payment["status"] == "succeeded" and payment["amount"] == expected:
        updated = await run_in_threadpool(repo.transition, db, order_id, repo.COMPLETED)
    elif payment["status"] in IN_FLIGHT_STATUSES:
        logger.info(f"Order {order_id} still awaiting capture ({payment['status']})")
        return order
    else:
        reason = payment["status"] if payment["status"] != "succeeded" else "amount mismatch"
        updated = await run_in_threadpool(repo.transition, db, order_id, repo.FAILED, failure_reason=reason)
        if updated:
            logger.warning(f"Order {order_id} failed: {reason}")

    if updated is None:
        # a concurrent confirmation already moved the order out of pending
        updated = await run_in_threadpool(repo.get_order, db, order_id)

    if updated["status"] == repo.COMPLETED:
        appended = await run_in_threadpool(_apply_enrollment, db, updated)
        logger.info(f"Order {order_id} completed; student {updated['student_id']} enrolled={appended}")
        updated = await run_in_threadpool(repo.get_order, db, order_id)
    return updated

def reconcile_enrollments(db: Database, limit: int = 100) -> List[str]:
    """Apply enrollment for completed orders that missed it. Returns the order ids handled."""
    handled = []
    for order in repo.list_unreconciled(db, limit=limit):
        appended = _apply_enrollment(db, order)
        if appended is None:
            continue
        if appended:
            logger.warning(f"Reconciled missing enrollment for order {order['_id']}")
        handled.append(order["_id"])
    return handled
