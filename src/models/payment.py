"""Payment database model (simulated gateway)."""

from sqlalchemy import JSON, Column, Enum, Float, ForeignKey, String

from schemas.enums import PaymentMethod, PaymentStatus
from .base import Base


class PaymentModel(Base):
    __tablename__ = "payments"

    payment_id = Column(String, primary_key=True, index=True)
    transaction_id = Column(String, unique=True, index=True, nullable=False)
    student_id = Column(
        String, ForeignKey("students.student_id"), index=True, nullable=False
    )
    course_id = Column(String, ForeignKey("courses.course_id"), nullable=False)
    mentor_id = Column(String, ForeignKey("mentors.mentor_id"), nullable=False)
    vendor_id = Column(String, ForeignKey("vendors.vendor_id"), nullable=False)
    enrollment_id = Column(
        String, ForeignKey("enrollments.enrollment_id"), unique=True, nullable=False
    )
    amount = Column(Float, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    payment_status = Column(
        Enum(PaymentStatus), nullable=False, default=PaymentStatus.SUCCESS
    )
    payment_gateway = Column(String, nullable=False, default="dummy")
    # Masked details only: last four card digits, holder, UPI id, wallet, bank
    payment_details = Column(JSON, default=dict)
    referral_code_used = Column(String, nullable=True)
    referred_by_mentor_id = Column(
        String, ForeignKey("mentors.mentor_id"), nullable=True
    )
    paid_at = Column(String, nullable=False)
