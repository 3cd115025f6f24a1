from sqlalchemy import Column, Float, ForeignKey, String, UniqueConstraint

from .base import Base


class EnrollmentModel(Base):
    """Immutable record of a student's admission into a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_id",
            name="uq_enrollments_student_course",
        ),
    )

    enrollment_id = Column(String, primary_key=True, index=True)
    student_id = Column(
        String, ForeignKey("students.student_id"), index=True, nullable=False
    )
    course_id = Column(
        String, ForeignKey("courses.course_id"), index=True, nullable=False
    )
    mentor_id = Column(
        String, ForeignKey("mentors.mentor_id"), index=True, nullable=False
    )
    vendor_id = Column(
        String, ForeignKey("vendors.vendor_id"), index=True, nullable=False
    )
    # Snapshot of the course price at enrollment time
    price_paid = Column(Float, nullable=False)
    referral_code_used = Column(String, nullable=True)
    referred_by_mentor_id = Column(
        String, ForeignKey("mentors.mentor_id"), nullable=True
    )
    enrolled_at = Column(String, nullable=False)
