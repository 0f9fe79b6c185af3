from pydantic import BaseModel, Field, constr
from typing import Literal, Optional
from datetime import datetime

ID = constr(strip_whitespace=True, min_length=1)

class OrderCreate(BaseModel):
    course_id: ID

class OrderCapture(BaseModel):
    order_id: ID
    payment_id: ID

class OrderOut(BaseModel):
    id: str = Field(alias="_id")
    course_id: str
    course_title: str
    course_image: Optional[str] = None
    student_id: str
    student_name: str
    student_email: str
    instructor_id: str
    instructor_name: str
    amount: float
    currency: str
    payment_method: str
    external_payment_id: str
    status: Literal["pending", "completed", "failed"]
    enrollment_applied: bool = False
    failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

class OrderCreatedOut(BaseModel):
    order: OrderOut
    client_secret: Optional[str] = None
