"""Student routes: enrollment, payments and course listings."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from api.routes.auth import require_role
from core.dependencies import EnrollmentManagerDep, StudentManagerDep
from models.user import UserModel
from schemas.course import Course
from schemas.enums import Role
from schemas.student import (
    Enrollment,
    EnrollmentResponse,
    EnrollRequest,
    Payment,
    PaymentRequest,
)

router = APIRouter(prefix="/api/student", tags=["Student"])

require_student = require_role(Role.STUDENT)


@router.post(
    "/enroll/{course_id}",
    summary="Enroll in a course",
    status_code=status.HTTP_201_CREATED,
)
def enroll(
    course_id: str,
    student_manager: StudentManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    req: Optional[EnrollRequest] = None,
    user: UserModel = Depends(require_student),
) -> EnrollmentResponse:
    student = student_manager.get_student_for_user(user.user_id)
    enrollment = enrollment_manager.enroll(
        student, course_id, req.referral_code if req else None
    )
    return EnrollmentResponse(
        message="Successfully enrolled in course",
        enrollment=Enrollment.model_validate(enrollment),
    )


@router.post(
    "/payments",
    summary="Pay for a course and enroll",
    status_code=status.HTTP_201_CREATED,
)
def pay_and_enroll(
    req: PaymentRequest,
    student_manager: StudentManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    user: UserModel = Depends(require_student),
) -> EnrollmentResponse:
    """Record a simulated payment and enroll, as one transaction."""
    student = student_manager.get_student_for_user(user.user_id)
    enrollment, payment = enrollment_manager.pay_and_enroll(
        student,
        req.course_id,
        req.payment_details.model_dump(),
        amount=req.amount,
        referral_code=req.referral_code,
    )
    return EnrollmentResponse(
        message="Payment successful and enrolled in course",
        enrollment=Enrollment.model_validate(enrollment),
        payment=Payment.model_validate(payment),
    )


@router.get("/payments", summary="List the student's payments")
def list_payments(
    student_manager: StudentManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    user: UserModel = Depends(require_student),
) -> List[Payment]:
    student = student_manager.get_student_for_user(user.user_id)
    return [Payment.model_validate(p) for p in enrollment_manager.list_payments(student)]


@router.get("/courses", summary="List enrolled courses")
def list_enrolled_courses(
    student_manager: StudentManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    user: UserModel = Depends(require_student),
) -> List[Course]:
    student = student_manager.get_student_for_user(user.user_id)
    return [
        Course.model_validate(c)
        for c in enrollment_manager.list_enrolled_courses(student)
    ]


@router.get("/available-courses", summary="List courses open to the student")
def list_available_courses(
    student_manager: StudentManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    user: UserModel = Depends(require_student),
) -> List[Course]:
    student = student_manager.get_student_for_user(user.user_id)
    return [
        Course.model_validate(c)
        for c in enrollment_manager.list_available_courses(student)
    ]
