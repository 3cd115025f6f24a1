"""Role registration.

Each registration creates an inactive identity, runs the role's gate and
issues an email-verification OTP, all in one transaction. Any failure leaves
no identity behind.
"""

import logging
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from models.user import UserModel
from schemas.enums import Role
from utils.mentor_manager import MentorManager
from utils.student_manager import StudentManager
from utils.user_manager import UserManager
from utils.vendor_manager import VendorManager

logger = logging.getLogger(__name__)


class RegistrationManager:
    def __init__(
        self,
        db: Session,
        user_manager: UserManager,
        vendor_manager: VendorManager,
        mentor_manager: MentorManager,
        student_manager: StudentManager,
    ):
        self.db = db
        self.user_manager = user_manager
        self.vendor_manager = vendor_manager
        self.mentor_manager = mentor_manager
        self.student_manager = student_manager

    def _register(
        self,
        role: Role,
        name: str,
        email: str,
        password: str,
        phone: Optional[str],
        gate: Callable[[UserModel], object],
    ) -> Tuple[UserModel, str]:
        try:
            identity = self.user_manager.add_user(
                name, email, password, role, phone=phone, is_active=False
            )
            gate(identity)
            otp = self.user_manager.issue_otp(identity.email)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(identity)
        logger.info("Registered %s %s, awaiting email verification", role.value, identity.email)
        return identity, otp

    def register_vendor(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        vendor_key: Optional[str] = None,
        company_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Tuple[UserModel, str]:
        """Register a vendor identity.

        Returns:
            Tuple of (identity, plain OTP for the mail collaborator).
        """
        return self._register(
            Role.VENDOR, name, email, password, phone,
            lambda identity: self.vendor_manager.self_register_vendor(
                identity, vendor_key, company_name, description
            ),
        )

    def register_mentor(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        mentor_key: Optional[str] = None,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Tuple[UserModel, str]:
        return self._register(
            Role.MENTOR, name, email, password, phone,
            lambda identity: self.mentor_manager.self_register_mentor(
                identity, mentor_key, specialization, bio
            ),
        )

    def register_student(
        self,
        name: str,
        email: str,
        password: str,
        referral_code: str,
        phone: Optional[str] = None,
    ) -> Tuple[UserModel, str]:
        return self._register(
            Role.STUDENT, name, email, password, phone,
            lambda identity: self.student_manager.admit_student(referral_code, identity),
        )
