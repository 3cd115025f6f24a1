"""Referral code schema definitions."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReferralCode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    vendor_id: str
    mentor_id: Optional[str] = None
    is_active: bool
    usage_count: int
    max_usage: Optional[int] = None
    created_at: str
    expires_at: Optional[str] = None


class CreateReferralCodeRequest(BaseModel):
    max_usage: Optional[int] = Field(
        default=None, ge=1, description="Omit for unlimited usage."
    )
    expires_at: Optional[datetime] = Field(
        default=None, description="Omit for a code that never expires."
    )


class AdminReferralCodeRequest(CreateReferralCodeRequest):
    vendor_id: str


class ReferralCodeListResponse(BaseModel):
    referral_codes: List[ReferralCode]
