"""User management utilities.

This module provides identity management: password hashing, identity
creation, authentication, the admin bootstrap and the one-time passwords that
verify a registrant's email address.
"""

import logging
import secrets
import uuid
from datetime import timedelta
from typing import List, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import ADMIN_DISPLAY_NAME, OTP_LENGTH, OTP_TTL_MINUTES
from core.exceptions import (
    EmailAlreadyRegisteredError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from models.otp import OTPModel
from models.user import UserModel
from schemas.enums import Role
from utils.timeutils import iso_after, is_expired, now_iso

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72

OTP_PURPOSE_REGISTRATION = "registration"


def _to_bcrypt_bytes(secret: str) -> bytes:
    secret_bytes = secret.encode("utf-8") if isinstance(secret, str) else secret
    return secret_bytes[:BCRYPT_MAX_BYTES]


class UserManager:
    """Manages identities using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Work factor used when hashing new secrets.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            logger.warning("Password exceeds %d bytes, truncating", BCRYPT_MAX_BYTES)
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(_to_bcrypt_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                _to_bcrypt_bytes(plain_password), hashed_password.encode("utf-8")
            )
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def add_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Role,
        phone: Optional[str] = None,
        is_active: bool = False,
    ) -> UserModel:
        """Add a new identity to the current transaction without committing.

        Registration flows call this and commit together with the slot or
        student row they create.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken.
        """
        email = email.strip().lower()
        if self.get_user_by_email(email) is not None:
            raise EmailAlreadyRegisteredError()

        model = UserModel(
            user_id=uuid.uuid4().hex,
            name=name.strip(),
            email=email,
            password_hash=self.hash_password(password),
            phone=phone,
            role=Role(role),
            is_active=is_active,
            is_email_verified=is_active,
            created_at=now_iso(),
        )
        self.db.add(model)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Another request registered the same email between check and insert
            self.db.rollback()
            raise EmailAlreadyRegisteredError() from e
        return model

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Role,
        phone: Optional[str] = None,
        is_active: bool = False,
    ) -> UserModel:
        """Create and commit a standalone identity."""
        model = self.add_user(name, email, password, role, phone, is_active)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created %s user: %s", model.role.value, model.email)
        return model

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )

    def get_user_by_id(self, user_id: str) -> UserModel:
        """Get a user by user ID.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model is None:
            raise UserNotFoundError()
        return model

    def list_users(self, role: Optional[Role] = None) -> List[UserModel]:
        query = self.db.query(UserModel)
        if role is not None:
            query = query.filter(UserModel.role == Role(role))
        return query.order_by(UserModel.created_at.desc()).all()

    def authenticate(self, email: str, password: str) -> UserModel:
        """Check credentials and account state.

        Raises:
            UnauthorizedError: On unknown email, wrong password or an account
                that has not verified its email yet.
        """
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        if not user.is_active:
            raise UnauthorizedError("Account is not active. Please verify your email.")
        return user

    def ensure_admin(self, email: str, password: str) -> UserModel:
        """Find or create the platform admin identity.

        The caller is responsible for checking the configured credentials.
        """
        admin = self.get_user_by_email(email)
        if admin is not None:
            if admin.role != Role.ADMIN:
                raise UnauthorizedError("Invalid credentials")
            return admin
        admin = self.create_user(
            name=ADMIN_DISPLAY_NAME,
            email=email,
            password=password,
            role=Role.ADMIN,
            is_active=True,
        )
        logger.info("Bootstrapped platform admin %s", admin.email)
        return admin

    # --- Email verification ---

    def issue_otp(self, email: str, purpose: str = OTP_PURPOSE_REGISTRATION) -> str:
        """Create a one-time password for ``email`` and return the plain code.

        Previous codes for the same email and purpose are discarded. The code
        is added to the current transaction; delivery belongs to the mail
        collaborator.
        """
        email = email.strip().lower()
        self.db.query(OTPModel).filter(
            OTPModel.email == email, OTPModel.purpose == purpose
        ).delete(synchronize_session=False)

        code = "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))
        self.db.add(
            OTPModel(
                email=email,
                otp_hash=self.hash_password(code),
                purpose=purpose,
                created_at=now_iso(),
                expires_at=iso_after(timedelta(minutes=OTP_TTL_MINUTES)),
            )
        )
        self.db.flush()
        logger.info("Issued %s OTP for %s", purpose, email)
        return code

    def verify_otp_and_activate(self, email: str, otp: str) -> UserModel:
        """Consume a registration OTP and activate the matching identity.

        Raises:
            ValidationError: If no valid code matches.
            UserNotFoundError: If the email has no identity.
        """
        email = email.strip().lower()
        record = (
            self.db.query(OTPModel)
            .filter(
                OTPModel.email == email,
                OTPModel.purpose == OTP_PURPOSE_REGISTRATION,
            )
            .order_by(OTPModel.id.desc())
            .first()
        )
        if record is None or is_expired(record.expires_at):
            raise ValidationError("OTP expired or not found")
        if not self.verify_password(otp, record.otp_hash):
            raise ValidationError("Invalid OTP")

        user = self.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError()

        user.is_active = True
        user.is_email_verified = True
        self.db.delete(record)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Activated user %s", user.email)
        return user
