"""Authentication routes.

This module handles HTTP endpoints for registration, email verification and
login, and provides the JWT helpers and role guards used by the other routers.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)
from core.dependencies import (
    OTPMailerDep,
    RegistrationManagerDep,
    StudentManagerDep,
    UserManagerDep,
)
from core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from models.user import UserModel
from schemas.enums import Role
from schemas.user import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    MentorRegisterRequest,
    RegisterResponse,
    StudentRegisterRequest,
    User,
    VendorRegisterRequest,
    VerifyOTPRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security; a missing header is reported by get_current_user
security = HTTPBearer(auto_error=False)

REGISTERED_MESSAGE = "Registration successful. Please verify your email with the OTP sent."


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def token_for(user: UserModel) -> str:
    return create_access_token({"sub": user.user_id, "role": user.role.value})


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        UnauthorizedError: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM]
        )
    except JWTError as e:
        raise UnauthorizedError() from e
    if payload.get("sub") is None:
        raise UnauthorizedError()
    return payload


def get_current_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> UserModel:
    """Get current authenticated identity.

    Raises:
        UnauthorizedError: If the identity is gone or not active.
    """
    try:
        user = user_manager.get_user_by_id(token_payload["sub"])
    except NotFoundError as e:
        raise UnauthorizedError("User not found") from e
    if not user.is_active:
        raise UnauthorizedError("Account is not active")
    return user


def require_role(*roles: Role) -> Callable[..., UserModel]:
    """Build a dependency that admits only identities holding one of ``roles``."""

    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in roles:
            raise ForbiddenError(
                f"This endpoint requires role: {', '.join(r.value for r in roles)}"
            )
        return user

    return dependency


@router.post(
    "/register/vendor",
    summary="Register a vendor",
    status_code=status.HTTP_201_CREATED,
)
def register_vendor(
    req: VendorRegisterRequest,
    registration: RegistrationManagerDep,
    mailer: OTPMailerDep,
) -> RegisterResponse:
    """Register a vendor identity.

    With a vendor key the identity claims the admin-created slot and is
    approved immediately; without one a pending vendor is created.
    """
    user, otp = registration.register_vendor(
        name=req.name,
        email=req.email,
        password=req.password,
        phone=req.phone,
        vendor_key=req.vendor_key,
        company_name=req.company_name,
        description=req.description,
    )
    mailer.send_verification_code(user.email, otp)
    return RegisterResponse(message=REGISTERED_MESSAGE, user_id=user.user_id)


@router.post(
    "/register/mentor",
    summary="Register a mentor",
    status_code=status.HTTP_201_CREATED,
)
def register_mentor(
    req: MentorRegisterRequest,
    registration: RegistrationManagerDep,
    mailer: OTPMailerDep,
) -> RegisterResponse:
    user, otp = registration.register_mentor(
        name=req.name,
        email=req.email,
        password=req.password,
        phone=req.phone,
        mentor_key=req.mentor_key,
        specialization=req.specialization,
        bio=req.bio,
    )
    mailer.send_verification_code(user.email, otp)
    return RegisterResponse(message=REGISTERED_MESSAGE, user_id=user.user_id)


@router.post(
    "/register/student",
    summary="Register a student with a referral code",
    status_code=status.HTTP_201_CREATED,
)
def register_student(
    req: StudentRegisterRequest,
    registration: RegistrationManagerDep,
    mailer: OTPMailerDep,
) -> RegisterResponse:
    user, otp = registration.register_student(
        name=req.name,
        email=req.email,
        password=req.password,
        referral_code=req.referral_code,
        phone=req.phone,
    )
    mailer.send_verification_code(user.email, otp)
    return RegisterResponse(message=REGISTERED_MESSAGE, user_id=user.user_id)


@router.post("/verify-otp", summary="Verify email with OTP")
def verify_otp(req: VerifyOTPRequest, user_manager: UserManagerDep) -> LoginResponse:
    """Activate the account and sign the user in."""
    user = user_manager.verify_otp_and_activate(req.email, req.otp)
    return LoginResponse(token=token_for(user), user=User.model_validate(user))


@router.post("/login", summary="Login")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep,
    student_manager: StudentManagerDep,
) -> LoginResponse:
    user = user_manager.authenticate(req.email, req.password)
    is_enrolled = None
    if user.role == Role.STUDENT:
        student = student_manager.find_student_for_user(user.user_id)
        is_enrolled = bool(student and student.is_enrolled)
    logger.info("User %s logged in", user.email)
    return LoginResponse(
        token=token_for(user),
        user=User.model_validate(user),
        is_enrolled=is_enrolled,
    )


@router.post("/admin/login", summary="Admin login")
def admin_login(req: LoginRequest, user_manager: UserManagerDep) -> LoginResponse:
    """Log in with the configured admin credentials.

    The admin identity is created on first successful login.

    Raises:
        UnauthorizedError: If admin login is not configured or the
            credentials do not match.
    """
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        logger.error("ADMIN_EMAIL/ADMIN_PASSWORD are not set")
        raise UnauthorizedError("Admin login is not configured")
    email_ok = secrets.compare_digest(
        req.email.strip().lower().encode("utf-8"),
        ADMIN_EMAIL.strip().lower().encode("utf-8"),
    )
    password_ok = secrets.compare_digest(
        req.password.encode("utf-8"), ADMIN_PASSWORD.encode("utf-8")
    )
    if not (email_ok and password_ok):
        logger.warning("Failed admin login for %s", req.email)
        raise UnauthorizedError("Invalid admin credentials")

    admin = user_manager.ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    return LoginResponse(token=token_for(admin), user=User.model_validate(admin))


@router.get("/me", summary="Current user")
def me(current_user: UserModel = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(user=User.model_validate(current_user))
