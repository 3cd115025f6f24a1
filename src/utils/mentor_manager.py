"""Mentor onboarding and the vendor-side views of a vendor's mentors."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import SYSTEM_ACTOR
from core.exceptions import AlreadyClaimedError, ForbiddenError, MentorNotFoundError
from models.mentor import MentorModel
from models.student import StudentModel
from models.user import UserModel
from schemas.enums import ApprovalAction, ApprovalStatus, Role
from utils.approval import apply_transition
from utils.keygen import generate_mentor_key, generate_unique
from utils.tenant import DefaultTenantResolver
from utils.timeutils import now_iso
from utils.vendor_manager import VendorManager

logger = logging.getLogger(__name__)


class MentorManager:
    """Manages mentor slots, owned by exactly one vendor each."""

    def __init__(
        self,
        db: Session,
        vendor_manager: Optional[VendorManager] = None,
        tenant_resolver: Optional[DefaultTenantResolver] = None,
    ):
        self.db = db
        self.vendor_manager = vendor_manager or VendorManager(db)
        self.tenant_resolver = tenant_resolver or DefaultTenantResolver(db)

    def get_mentor(self, mentor_id: str) -> MentorModel:
        mentor = (
            self.db.query(MentorModel).filter(MentorModel.mentor_id == mentor_id).first()
        )
        if mentor is None:
            raise MentorNotFoundError()
        return mentor

    def get_by_key(self, mentor_key: str) -> Optional[MentorModel]:
        return (
            self.db.query(MentorModel)
            .filter(MentorModel.mentor_key == mentor_key.strip())
            .first()
        )

    def key_exists(self, mentor_key: str) -> bool:
        return self.get_by_key(mentor_key) is not None

    def get_mentor_for_user(self, user_id: str) -> MentorModel:
        mentor = self.db.query(MentorModel).filter(MentorModel.user_id == user_id).first()
        if mentor is None:
            raise MentorNotFoundError("No mentor profile is linked to this account")
        return mentor

    def _new_slot(
        self,
        vendor_id: str,
        created_by: str,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> MentorModel:
        mentor = MentorModel(
            mentor_id=uuid.uuid4().hex,
            mentor_key=generate_unique(
                generate_mentor_key, self.key_exists, label="mentor key"
            ),
            vendor_id=vendor_id,
            specialization=specialization,
            bio=bio,
            status=ApprovalStatus.PENDING,
            created_by=created_by,
            created_at=now_iso(),
        )
        self.db.add(mentor)
        self.db.flush()
        return mentor

    def create_mentor(
        self,
        vendor_user: UserModel,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> MentorModel:
        """Create an unclaimed mentor slot under the acting vendor.

        Args:
            vendor_user: Identity of the vendor creating the slot.
            specialization: Optional specialization shown to students.
            bio: Optional biography.

        Returns:
            The committed mentor slot; its ``mentor_key`` is shared with the
            mentor out of band.
        """
        if vendor_user.role != Role.VENDOR:
            raise ForbiddenError("Only vendor accounts can create mentors")
        vendor = self.vendor_manager.get_vendor_for_user(vendor_user.user_id)
        try:
            mentor = self._new_slot(
                vendor.vendor_id, vendor_user.user_id, specialization, bio
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(mentor)
        logger.info("Vendor %s created mentor %s", vendor.vendor_id, mentor.mentor_id)
        return mentor

    # --- Registration gate ---

    def bind_mentor_slot(
        self,
        mentor_key: str,
        identity: UserModel,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> MentorModel:
        """Bind ``identity`` to the slot holding ``mentor_key`` without committing.

        Mentor keys do not expire.

        Raises:
            MentorNotFoundError: If no slot has this key.
            AlreadyClaimedError: If the slot or the identity is already bound.
        """
        mentor = self.get_by_key(mentor_key)
        if mentor is None:
            raise MentorNotFoundError("Invalid mentor key")
        if mentor.user_id is not None:
            raise AlreadyClaimedError("Mentor account already exists for this key")
        if self.db.query(MentorModel).filter(MentorModel.user_id == identity.user_id).first():
            raise AlreadyClaimedError("This account already owns a mentor profile")

        mentor.user_id = identity.user_id
        if specialization:
            mentor.specialization = specialization
        if bio:
            mentor.bio = bio
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyClaimedError("Mentor account already exists for this key") from e
        logger.info("User %s claimed mentor %s", identity.user_id, mentor.mentor_id)
        return mentor

    def claim_mentor_slot(
        self,
        mentor_key: str,
        identity: UserModel,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> MentorModel:
        if identity.role != Role.MENTOR:
            raise ForbiddenError("Only mentor accounts can claim a mentor key")
        try:
            mentor = self.bind_mentor_slot(mentor_key, identity, specialization, bio)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(mentor)
        return mentor

    def self_register_mentor(
        self,
        identity: UserModel,
        mentor_key: Optional[str] = None,
        specialization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> MentorModel:
        """Attach a freshly registered mentor identity to a slot.

        With a key the slot is claimed and approved by the system actor.
        Without one, a pending slot is created under the default tenant.
        Joins the caller's transaction.
        """
        if mentor_key:
            mentor = self.bind_mentor_slot(mentor_key, identity, specialization, bio)
            apply_transition(mentor, ApprovalAction.APPROVE, SYSTEM_ACTOR)
            self.db.flush()
            return mentor

        vendor = self.tenant_resolver.resolve()
        mentor = self._new_slot(vendor.vendor_id, identity.user_id, specialization, bio)
        mentor.user_id = identity.user_id
        self.db.flush()
        logger.info(
            "Mentor %s registered without a key under vendor %s, pending approval",
            mentor.mentor_id,
            vendor.vendor_id,
        )
        return mentor

    # --- Vendor views ---

    def get_owned_mentor(self, vendor_user: UserModel, mentor_id: str) -> MentorModel:
        """Return a mentor of the acting vendor.

        A mentor that belongs to another vendor is reported as not found.
        """
        vendor = self.vendor_manager.get_vendor_for_user(vendor_user.user_id)
        mentor = (
            self.db.query(MentorModel)
            .filter(
                MentorModel.mentor_id == mentor_id,
                MentorModel.vendor_id == vendor.vendor_id,
            )
            .first()
        )
        if mentor is None:
            raise MentorNotFoundError()
        return mentor

    def transition_mentor(
        self,
        vendor_user: UserModel,
        mentor_id: str,
        action: ApprovalAction,
        reason: Optional[str] = None,
    ) -> MentorModel:
        if vendor_user.role != Role.VENDOR:
            raise ForbiddenError("Only the owning vendor can change a mentor's status")
        mentor = self.get_owned_mentor(vendor_user, mentor_id)
        apply_transition(mentor, action, vendor_user.user_id, reason)
        self.db.commit()
        self.db.refresh(mentor)
        return mentor

    def list_mentors_for_vendor(self, vendor_user: UserModel) -> List[MentorModel]:
        vendor = self.vendor_manager.get_vendor_for_user(vendor_user.user_id)
        return (
            self.db.query(MentorModel)
            .filter(MentorModel.vendor_id == vendor.vendor_id)
            .order_by(MentorModel.created_at.desc())
            .all()
        )

    def list_students(self, mentor: MentorModel) -> List[StudentModel]:
        return (
            self.db.query(StudentModel)
            .filter(StudentModel.mentor_id == mentor.mentor_id)
            .order_by(StudentModel.created_at.desc())
            .all()
        )
