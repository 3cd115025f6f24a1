"""Student, enrollment and payment schema definitions."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import PaymentMethod, PaymentStatus


class EnrolledCourse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: str
    enrolled_at: str


class Student(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: str
    user_id: str
    mentor_id: str
    referral_code: str
    is_enrolled: bool
    created_at: str
    enrolled_courses: List[EnrolledCourse] = Field(default_factory=list)


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: str
    student_id: str
    course_id: str
    mentor_id: str
    vendor_id: str
    price_paid: float
    referral_code_used: Optional[str] = None
    referred_by_mentor_id: Optional[str] = None
    enrolled_at: str


class Payment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    transaction_id: str
    student_id: str
    course_id: str
    enrollment_id: str
    amount: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_gateway: str
    payment_details: Dict[str, Any] = Field(default_factory=dict)
    referral_code_used: Optional[str] = None
    paid_at: str


class EnrollRequest(BaseModel):
    referral_code: Optional[str] = None


class PaymentDetails(BaseModel):
    payment_method: PaymentMethod
    card_number: Optional[str] = None
    card_holder: Optional[str] = None
    upi_id: Optional[str] = None
    wallet_name: Optional[str] = None
    bank_name: Optional[str] = None


class PaymentRequest(BaseModel):
    course_id: str
    payment_details: PaymentDetails
    amount: Optional[float] = Field(
        default=None, ge=0, description="Defaults to the course price."
    )
    referral_code: Optional[str] = None


class EnrollmentResponse(BaseModel):
    success: bool = True
    message: str
    enrollment: Enrollment
    payment: Optional[Payment] = None
