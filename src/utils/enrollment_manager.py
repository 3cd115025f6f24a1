"""Course enrollment and simulated payments.

An enrollment touches several rows: the optional referral code's usage
counter, the student's enrolled-course list and enrolled flag, the enrollment
record and, for paid enrollments, the payment record. They are committed
together or not at all.
"""

import logging
import secrets
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import PAYMENT_GATEWAY
from core.exceptions import AlreadyEnrolledError, CourseNotFoundError, ValidationError
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.mentor import MentorModel
from models.payment import PaymentModel
from models.student import StudentCourseModel, StudentModel
from schemas.enums import PaymentMethod, PaymentStatus
from utils.course_manager import CourseManager, effective_price
from utils.referral_manager import ReferralManager
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)

# Amounts within this tolerance of the course price are accepted
AMOUNT_TOLERANCE = 0.005

# Detail field each payment method needs
REQUIRED_PAYMENT_FIELDS = {
    PaymentMethod.CARD: "card_number",
    PaymentMethod.UPI: "upi_id",
    PaymentMethod.WALLET: "wallet_name",
    PaymentMethod.NETBANKING: "bank_name",
}

# Unique constraints that mean the student already holds the course. SQLite
# reports the violated columns rather than the constraint name.
DUPLICATE_ENROLLMENT_MARKERS = (
    "uq_enrollments_student_course",
    "uq_student_courses_student_course",
    "enrollments.student_id, enrollments.course_id",
    "student_courses.student_id, student_courses.course_id",
)


def is_duplicate_enrollment(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in DUPLICATE_ENROLLMENT_MARKERS)


def generate_transaction_id() -> str:
    return f"DUMMY-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def mask_payment_details(details: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only what may be stored: card last four digits and the
    non-sensitive identifiers of the other methods.

    Raises:
        ValidationError: If the method is unknown or its detail is missing.
    """
    try:
        method = PaymentMethod(details.get("payment_method"))
    except ValueError as e:
        raise ValidationError("Unsupported payment method") from e

    required = REQUIRED_PAYMENT_FIELDS[method]
    if not details.get(required):
        raise ValidationError(f"{required} is required for {method.value} payments")

    masked: Dict[str, Any] = {"payment_method": method.value}
    if method == PaymentMethod.CARD:
        digits = "".join(ch for ch in str(details["card_number"]) if ch.isdigit())
        if len(digits) < 4:
            raise ValidationError("Invalid card number")
        masked["card_last4"] = digits[-4:]
        if details.get("card_holder"):
            masked["card_holder"] = details["card_holder"]
    else:
        masked[required] = details[required]
    return masked


class EnrollmentManager:
    """Runs the enrollment transaction and the student/mentor read side."""

    def __init__(
        self,
        db: Session,
        referral_manager: Optional[ReferralManager] = None,
        course_manager: Optional[CourseManager] = None,
    ):
        self.db = db
        self.referral_manager = referral_manager or ReferralManager(db)
        self.course_manager = course_manager or CourseManager(db)

    def _add_enrollment(
        self,
        student: StudentModel,
        course_id: str,
        referral_code: Optional[str] = None,
    ) -> Tuple[EnrollmentModel, CourseModel]:
        referred_by_mentor_id = None
        code_used = None
        if referral_code:
            code = self.referral_manager.consume(referral_code)
            code_used = code.code
            referred_by_mentor_id = code.mentor_id

        course = self.course_manager.get_course(course_id)
        if not course.is_active:
            raise CourseNotFoundError("Course is not available")

        already = (
            self.db.query(StudentCourseModel)
            .filter(
                StudentCourseModel.student_id == student.student_id,
                StudentCourseModel.course_id == course.course_id,
            )
            .first()
        )
        if already is not None:
            raise AlreadyEnrolledError()

        enrolled_at = now_iso()
        student.enrolled_courses.append(
            StudentCourseModel(course_id=course.course_id, enrolled_at=enrolled_at)
        )
        if not student.is_enrolled:
            student.is_enrolled = True

        enrollment = EnrollmentModel(
            enrollment_id=uuid.uuid4().hex,
            student_id=student.student_id,
            course_id=course.course_id,
            mentor_id=student.mentor_id,
            vendor_id=student.mentor.vendor_id,
            price_paid=effective_price(course),
            referral_code_used=code_used,
            referred_by_mentor_id=referred_by_mentor_id,
            enrolled_at=enrolled_at,
        )
        self.db.add(enrollment)
        self.db.flush()
        return enrollment, course

    def enroll(
        self,
        student: StudentModel,
        course_id: str,
        referral_code: Optional[str] = None,
    ) -> EnrollmentModel:
        """Enroll ``student`` into ``course_id``.

        Args:
            student: Enrolling student.
            course_id: Target course.
            referral_code: Optional code consumed as part of the enrollment.

        Returns:
            The committed enrollment, carrying the price snapshot.

        Raises:
            InvalidReferralCodeError: Or a subclass, for an unusable code.
            CourseNotFoundError: If the course is missing or inactive.
            AlreadyEnrolledError: If the student already has this course.
        """
        try:
            enrollment, _ = self._add_enrollment(student, course_id, referral_code)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_duplicate_enrollment(e):
                # Lost a race with a concurrent enrollment into the same course
                raise AlreadyEnrolledError() from e
            raise
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(enrollment)
        logger.info(
            "Student %s enrolled in course %s at %.2f",
            student.student_id,
            course_id,
            enrollment.price_paid,
        )
        return enrollment

    def pay_and_enroll(
        self,
        student: StudentModel,
        course_id: str,
        payment_details: Dict[str, Any],
        amount: Optional[float] = None,
        referral_code: Optional[str] = None,
    ) -> Tuple[EnrollmentModel, PaymentModel]:
        """Record a simulated payment and enroll in the same transaction.

        Args:
            student: Paying student.
            course_id: Target course.
            payment_details: Method and method-specific details, unmasked.
            amount: Amount charged; defaults to the course's effective price
                and must match it when given.
            referral_code: Optional code consumed as part of the enrollment.

        Returns:
            Tuple of (enrollment, payment).
        """
        masked = mask_payment_details(payment_details)
        try:
            enrollment, course = self._add_enrollment(student, course_id, referral_code)
            if amount is None:
                amount = enrollment.price_paid
            elif abs(amount - enrollment.price_paid) > AMOUNT_TOLERANCE:
                raise ValidationError(
                    f"Payment amount {amount:.2f} does not match course price "
                    f"{enrollment.price_paid:.2f}"
                )

            payment = PaymentModel(
                payment_id=uuid.uuid4().hex,
                transaction_id=generate_transaction_id(),
                student_id=student.student_id,
                course_id=course.course_id,
                mentor_id=enrollment.mentor_id,
                vendor_id=enrollment.vendor_id,
                enrollment_id=enrollment.enrollment_id,
                amount=amount,
                payment_method=PaymentMethod(masked["payment_method"]),
                payment_status=PaymentStatus.SUCCESS,
                payment_gateway=PAYMENT_GATEWAY,
                payment_details=masked,
                referral_code_used=enrollment.referral_code_used,
                referred_by_mentor_id=enrollment.referred_by_mentor_id,
                paid_at=now_iso(),
            )
            self.db.add(payment)
            self.db.flush()
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_duplicate_enrollment(e):
                # Lost a race with a concurrent enrollment into the same course
                raise AlreadyEnrolledError() from e
            raise
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(enrollment)
        self.db.refresh(payment)
        logger.info(
            "Payment %s of %.2f recorded for student %s, course %s",
            payment.transaction_id,
            payment.amount,
            student.student_id,
            course_id,
        )
        return enrollment, payment

    # --- Read side ---

    def list_enrolled_courses(self, student: StudentModel) -> List[CourseModel]:
        return (
            self.db.query(CourseModel)
            .join(StudentCourseModel, StudentCourseModel.course_id == CourseModel.course_id)
            .filter(StudentCourseModel.student_id == student.student_id)
            .order_by(StudentCourseModel.id.asc())
            .all()
        )

    def list_available_courses(self, student: StudentModel) -> List[CourseModel]:
        """Active courses of the student's vendor the student has not taken yet."""
        enrolled = {item.course_id for item in student.enrolled_courses}
        courses = self.course_manager.list_active_for_vendor(student.mentor.vendor_id)
        return [course for course in courses if course.course_id not in enrolled]

    def list_mentor_enrollments(self, mentor: MentorModel) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .filter(EnrollmentModel.mentor_id == mentor.mentor_id)
            .order_by(EnrollmentModel.enrolled_at.desc())
            .all()
        )

    def list_payments(self, student: StudentModel) -> List[PaymentModel]:
        return (
            self.db.query(PaymentModel)
            .filter(PaymentModel.student_id == student.student_id)
            .order_by(PaymentModel.paid_at.desc())
            .all()
        )
