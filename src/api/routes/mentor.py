"""Mentor routes: claiming a mentor key, referral codes and the mentor's students."""

from typing import List

from fastapi import APIRouter, Depends, status

from api.routes.auth import require_role
from core.dependencies import (
    EnrollmentManagerDep,
    MentorManagerDep,
    ReferralManagerDep,
)
from models.user import UserModel
from schemas.enums import Role
from schemas.referral import (
    CreateReferralCodeRequest,
    ReferralCode,
    ReferralCodeListResponse,
)
from schemas.student import Enrollment, Student
from schemas.vendor import ClaimMentorRequest, Mentor

router = APIRouter(prefix="/api/mentor", tags=["Mentor"])

require_mentor = require_role(Role.MENTOR)


@router.post("/claim", summary="Claim a mentor key")
def claim_mentor(
    req: ClaimMentorRequest,
    mentor_manager: MentorManagerDep,
    user: UserModel = Depends(require_mentor),
) -> Mentor:
    mentor = mentor_manager.claim_mentor_slot(
        req.mentor_key, user, req.specialization, req.bio
    )
    return Mentor.model_validate(mentor)


@router.post(
    "/referral-codes",
    summary="Create a referral code",
    status_code=status.HTTP_201_CREATED,
)
def create_referral_code(
    req: CreateReferralCodeRequest,
    mentor_manager: MentorManagerDep,
    referral_manager: ReferralManagerDep,
    user: UserModel = Depends(require_mentor),
) -> ReferralCode:
    """Create a referral code owned by the calling mentor.

    At most five codes may be active at a time.
    """
    mentor = mentor_manager.get_mentor_for_user(user.user_id)
    code = referral_manager.create_mentor_code(
        mentor, user.name, req.max_usage, req.expires_at
    )
    return ReferralCode.model_validate(code)


@router.get("/referral-codes", summary="List the mentor's referral codes")
def list_referral_codes(
    mentor_manager: MentorManagerDep,
    referral_manager: ReferralManagerDep,
    user: UserModel = Depends(require_mentor),
) -> ReferralCodeListResponse:
    mentor = mentor_manager.get_mentor_for_user(user.user_id)
    codes = referral_manager.list_for_mentor(mentor.mentor_id)
    return ReferralCodeListResponse(
        referral_codes=[ReferralCode.model_validate(c) for c in codes]
    )


@router.post("/referral-codes/{code}/deactivate", summary="Deactivate a referral code")
def deactivate_referral_code(
    code: str,
    mentor_manager: MentorManagerDep,
    referral_manager: ReferralManagerDep,
    user: UserModel = Depends(require_mentor),
) -> ReferralCode:
    mentor = mentor_manager.get_mentor_for_user(user.user_id)
    return ReferralCode.model_validate(referral_manager.deactivate(mentor, code))


@router.get("/students", summary="List the mentor's students")
def list_students(
    mentor_manager: MentorManagerDep,
    user: UserModel = Depends(require_mentor),
) -> List[Student]:
    mentor = mentor_manager.get_mentor_for_user(user.user_id)
    return [Student.model_validate(s) for s in mentor_manager.list_students(mentor)]


@router.get("/enrollments", summary="List enrollments under the mentor")
def list_enrollments(
    mentor_manager: MentorManagerDep,
    enrollment_manager: EnrollmentManagerDep,
    user: UserModel = Depends(require_mentor),
) -> List[Enrollment]:
    mentor = mentor_manager.get_mentor_for_user(user.user_id)
    return [
        Enrollment.model_validate(e)
        for e in enrollment_manager.list_mentor_enrollments(mentor)
    ]
