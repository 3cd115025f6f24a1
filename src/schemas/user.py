"""User schema definitions.

Identity views and the request/response bodies of the auth routes.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import Role


class User(BaseModel):
    """Public view of an identity. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: Role
    is_active: bool = False
    is_email_verified: bool = False
    created_at: str


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=128)
    phone: Optional[str] = None


class VendorRegisterRequest(RegisterRequest):
    vendor_key: Optional[str] = Field(
        default=None,
        description="Key issued by an admin. Without it the vendor waits for approval.",
    )
    company_name: Optional[str] = None
    description: Optional[str] = None


class MentorRegisterRequest(RegisterRequest):
    mentor_key: Optional[str] = Field(
        default=None,
        description="Key issued by a vendor. Without it the mentor waits for approval.",
    )
    specialization: Optional[str] = None
    bio: Optional[str] = None


class StudentRegisterRequest(RegisterRequest):
    referral_code: str = Field(min_length=1)


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str


class VerifyOTPRequest(BaseModel):
    email: str
    otp: str = Field(min_length=4, max_length=12)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: User
    is_enrolled: Optional[bool] = Field(
        default=None, description="Only set for students."
    )


class CurrentUserResponse(BaseModel):
    user: User
