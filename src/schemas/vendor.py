"""Vendor and mentor schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import ApprovalStatus


class ApprovalInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: ApprovalStatus
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[str] = None
    rejection_reason: Optional[str] = None


class Vendor(ApprovalInfo):
    vendor_id: str
    vendor_key: str
    company_name: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    created_by: str
    created_at: str
    expires_at: Optional[str] = None


class Mentor(ApprovalInfo):
    mentor_id: str
    mentor_key: str
    vendor_id: str
    user_id: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    created_by: str
    created_at: str


class CreateVendorRequest(BaseModel):
    company_name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class CreateVendorResponse(BaseModel):
    vendor: Vendor
    referral_code: Optional[str] = Field(
        default=None, description="Vendor-scoped referral code created with the vendor."
    )
    message: str = "Share this vendor key with the vendor for registration"


class ClaimVendorRequest(BaseModel):
    vendor_key: str = Field(min_length=1)


class CreateMentorRequest(BaseModel):
    specialization: Optional[str] = None
    bio: Optional[str] = None


class CreateMentorResponse(BaseModel):
    mentor: Mentor
    message: str = "Share this mentor key with the mentor for registration"


class ClaimMentorRequest(BaseModel):
    mentor_key: str = Field(min_length=1)
    specialization: Optional[str] = None
    bio: Optional[str] = None


class ApprovalRequest(BaseModel):
    reason: Optional[str] = Field(
        default=None, description="Rejection or suspension reason."
    )
