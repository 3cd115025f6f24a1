"""Vendor routes: claiming a vendor key and managing the vendor's mentors."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from api.routes.auth import require_role
from core.dependencies import MentorManagerDep, VendorManagerDep
from models.user import UserModel
from schemas.enums import ApprovalAction, Role
from schemas.vendor import (
    ApprovalRequest,
    ClaimVendorRequest,
    CreateMentorRequest,
    CreateMentorResponse,
    Mentor,
    Vendor,
)

router = APIRouter(prefix="/api/vendor", tags=["Vendor"])

require_vendor = require_role(Role.VENDOR)


@router.post("/claim", summary="Claim a vendor key")
def claim_vendor(
    req: ClaimVendorRequest,
    vendor_manager: VendorManagerDep,
    user: UserModel = Depends(require_vendor),
) -> Vendor:
    vendor = vendor_manager.claim_vendor_slot(req.vendor_key, user)
    return Vendor.model_validate(vendor)


@router.post(
    "/mentors",
    summary="Create a mentor slot",
    status_code=status.HTTP_201_CREATED,
)
def create_mentor(
    req: CreateMentorRequest,
    mentor_manager: MentorManagerDep,
    user: UserModel = Depends(require_vendor),
) -> CreateMentorResponse:
    mentor = mentor_manager.create_mentor(user, req.specialization, req.bio)
    return CreateMentorResponse(mentor=Mentor.model_validate(mentor))


@router.get("/mentors", summary="List the vendor's mentors")
def list_mentors(
    mentor_manager: MentorManagerDep,
    user: UserModel = Depends(require_vendor),
) -> List[Mentor]:
    return [Mentor.model_validate(m) for m in mentor_manager.list_mentors_for_vendor(user)]


@router.post("/mentors/{mentor_id}/{action}", summary="Approve, reject or suspend a mentor")
def transition_mentor(
    mentor_id: str,
    action: ApprovalAction,
    mentor_manager: MentorManagerDep,
    req: Optional[ApprovalRequest] = None,
    user: UserModel = Depends(require_vendor),
) -> Mentor:
    mentor = mentor_manager.transition_mentor(
        user, mentor_id, action, req.reason if req else None
    )
    return Mentor.model_validate(mentor)
