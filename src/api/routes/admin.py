"""Admin routes: vendor onboarding, vendor approval, referral codes and courses."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.routes.auth import require_role
from core.dependencies import CourseManagerDep, ReferralManagerDep, VendorManagerDep
from models.user import UserModel
from schemas.course import Course, CreateCourseRequest, UpdateCourseRequest
from schemas.enums import ApprovalAction, ApprovalStatus, Role
from schemas.referral import AdminReferralCodeRequest, ReferralCode
from schemas.vendor import (
    ApprovalRequest,
    CreateVendorRequest,
    CreateVendorResponse,
    Vendor,
)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

require_admin = require_role(Role.ADMIN)


@router.post(
    "/vendors",
    summary="Create a vendor slot",
    status_code=status.HTTP_201_CREATED,
)
def create_vendor(
    req: CreateVendorRequest,
    vendor_manager: VendorManagerDep,
    admin: UserModel = Depends(require_admin),
) -> CreateVendorResponse:
    """Create a vendor slot with a 24h key and a vendor referral code."""
    vendor, referral_code = vendor_manager.create_vendor(
        admin, req.company_name, req.description
    )
    return CreateVendorResponse(
        vendor=Vendor.model_validate(vendor), referral_code=referral_code.code
    )


@router.get("/vendors", summary="List vendors")
def list_vendors(
    vendor_manager: VendorManagerDep,
    status_filter: Optional[ApprovalStatus] = Query(default=None, alias="status"),
    admin: UserModel = Depends(require_admin),
) -> List[Vendor]:
    return [Vendor.model_validate(v) for v in vendor_manager.list_vendors(status_filter)]


@router.post("/vendors/{vendor_id}/{action}", summary="Approve, reject or suspend a vendor")
def transition_vendor(
    vendor_id: str,
    action: ApprovalAction,
    vendor_manager: VendorManagerDep,
    req: Optional[ApprovalRequest] = None,
    admin: UserModel = Depends(require_admin),
) -> Vendor:
    vendor = vendor_manager.transition_vendor(
        admin, vendor_id, action, req.reason if req else None
    )
    return Vendor.model_validate(vendor)


@router.post(
    "/referral-codes",
    summary="Create a vendor referral code",
    status_code=status.HTTP_201_CREATED,
)
def create_referral_code(
    req: AdminReferralCodeRequest,
    vendor_manager: VendorManagerDep,
    referral_manager: ReferralManagerDep,
    admin: UserModel = Depends(require_admin),
) -> ReferralCode:
    vendor = vendor_manager.get_vendor(req.vendor_id)
    code = referral_manager.create_vendor_code(vendor, req.max_usage, req.expires_at)
    return ReferralCode.model_validate(code)


@router.post(
    "/courses",
    summary="Create a course",
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    req: CreateCourseRequest,
    course_manager: CourseManagerDep,
    vendor_manager: VendorManagerDep,
    admin: UserModel = Depends(require_admin),
) -> Course:
    if req.vendor_id:
        vendor_manager.get_vendor(req.vendor_id)
    course = course_manager.create_course(admin, **req.model_dump())
    return Course.model_validate(course)


@router.patch("/courses/{course_id}", summary="Update a course")
def update_course(
    course_id: str,
    req: UpdateCourseRequest,
    course_manager: CourseManagerDep,
    admin: UserModel = Depends(require_admin),
) -> Course:
    course = course_manager.update_course(
        admin, course_id, req.model_dump(exclude_unset=True)
    )
    return Course.model_validate(course)


@router.get("/courses", summary="List courses")
def list_courses(
    course_manager: CourseManagerDep,
    admin: UserModel = Depends(require_admin),
) -> List[Course]:
    return [Course.model_validate(c) for c in course_manager.list_courses()]
