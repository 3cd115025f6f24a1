"""Vendor onboarding.

Admins create vendor slots carrying a one-time key; a vendor identity binds to
a slot by presenting the key. Vendors may also self-register, with or without
a key. Approval transitions on vendors are reserved to admins.
"""

import logging
import uuid
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import (
    DEFAULT_VENDOR_COMPANY_SUFFIX,
    DEFAULT_VENDOR_REFERRAL_MAX_USAGE,
    SYSTEM_ACTOR,
    VENDOR_KEY_TTL_HOURS,
)
from core.exceptions import (
    AlreadyClaimedError,
    ForbiddenError,
    KeyExpiredError,
    VendorNotFoundError,
)
from models.referral_code import ReferralCodeModel
from models.user import UserModel
from models.vendor import VendorModel
from schemas.enums import ApprovalAction, ApprovalStatus, Role
from utils.approval import apply_transition
from utils.keygen import generate_unique, generate_vendor_key
from utils.referral_manager import ReferralManager
from utils.timeutils import is_expired, iso_after, now_iso

logger = logging.getLogger(__name__)


def _require_role(identity: UserModel, role: Role) -> None:
    if identity.role != role:
        raise ForbiddenError(f"Only {role.value} accounts can perform this action")


class VendorManager:
    """Manages vendor slots and their approval lifecycle."""

    def __init__(self, db: Session, referral_manager: Optional[ReferralManager] = None):
        self.db = db
        self.referral_manager = referral_manager or ReferralManager(db)

    # --- Lookups ---

    def get_vendor(self, vendor_id: str) -> VendorModel:
        vendor = (
            self.db.query(VendorModel).filter(VendorModel.vendor_id == vendor_id).first()
        )
        if vendor is None:
            raise VendorNotFoundError()
        return vendor

    def get_by_key(self, vendor_key: str) -> Optional[VendorModel]:
        return (
            self.db.query(VendorModel)
            .filter(VendorModel.vendor_key == vendor_key.strip())
            .first()
        )

    def key_exists(self, vendor_key: str) -> bool:
        return self.get_by_key(vendor_key) is not None

    def get_vendor_for_user(self, user_id: str) -> VendorModel:
        """Return the vendor slot bound to ``user_id``.

        Raises:
            VendorNotFoundError: If the identity has not claimed a slot.
        """
        vendor = self.db.query(VendorModel).filter(VendorModel.user_id == user_id).first()
        if vendor is None:
            raise VendorNotFoundError("No vendor profile is linked to this account")
        return vendor

    def list_vendors(self, status: Optional[ApprovalStatus] = None) -> List[VendorModel]:
        query = self.db.query(VendorModel)
        if status is not None:
            query = query.filter(VendorModel.status == ApprovalStatus(status))
        return query.order_by(VendorModel.created_at.desc()).all()

    # --- Creation ---

    def _new_slot(
        self,
        company_name: str,
        description: Optional[str],
        created_by: str,
        expires_at: Optional[str] = None,
    ) -> VendorModel:
        vendor = VendorModel(
            vendor_id=uuid.uuid4().hex,
            vendor_key=generate_unique(
                generate_vendor_key, self.key_exists, label="vendor key"
            ),
            company_name=company_name,
            description=description,
            status=ApprovalStatus.PENDING,
            created_by=created_by,
            created_at=now_iso(),
            expires_at=expires_at,
        )
        self.db.add(vendor)
        self.db.flush()
        return vendor

    def create_vendor(
        self,
        admin: UserModel,
        company_name: str,
        description: Optional[str] = None,
    ) -> Tuple[VendorModel, ReferralCodeModel]:
        """Create an unclaimed vendor slot together with its referral code.

        The key is valid for ``VENDOR_KEY_TTL_HOURS``. The vendor-scoped
        referral code is capped at ``DEFAULT_VENDOR_REFERRAL_MAX_USAGE`` uses.

        Args:
            admin: Acting admin identity.
            company_name: Vendor's company name.
            description: Optional description.

        Returns:
            Tuple of (vendor, referral_code).

        Raises:
            ForbiddenError: If ``admin`` is not an admin.
            KeyGenerationExhaustedError: If no unique key or code was found.
        """
        _require_role(admin, Role.ADMIN)
        try:
            vendor = self._new_slot(
                company_name.strip(),
                description,
                created_by=admin.user_id,
                expires_at=iso_after(timedelta(hours=VENDOR_KEY_TTL_HOURS)),
            )
            referral_code = self.referral_manager.add_vendor_code(
                vendor, max_usage=DEFAULT_VENDOR_REFERRAL_MAX_USAGE
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(vendor)
        self.db.refresh(referral_code)
        logger.info(
            "Admin %s created vendor %s (%s)", admin.user_id, vendor.vendor_id, company_name
        )
        return vendor, referral_code

    # --- Registration gate ---

    def bind_vendor_slot(self, vendor_key: str, identity: UserModel) -> VendorModel:
        """Bind ``identity`` to the slot holding ``vendor_key`` without committing.

        Checks run in order: the key exists, the slot is unclaimed, the key has
        not expired. The slot's status is left unchanged.

        Raises:
            VendorNotFoundError: If no slot has this key.
            AlreadyClaimedError: If the slot or the identity is already bound.
            KeyExpiredError: If the key's validity window has passed.
        """
        vendor = self.get_by_key(vendor_key)
        if vendor is None:
            raise VendorNotFoundError("Invalid vendor key")
        if vendor.user_id is not None:
            raise AlreadyClaimedError("Vendor account already exists for this key")
        if is_expired(vendor.expires_at):
            raise KeyExpiredError()
        if self.db.query(VendorModel).filter(VendorModel.user_id == identity.user_id).first():
            raise AlreadyClaimedError("This account already owns a vendor profile")

        vendor.user_id = identity.user_id
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyClaimedError("Vendor account already exists for this key") from e
        logger.info("User %s claimed vendor %s", identity.user_id, vendor.vendor_id)
        return vendor

    def claim_vendor_slot(self, vendor_key: str, identity: UserModel) -> VendorModel:
        """Claim a vendor slot for an existing vendor identity and commit."""
        _require_role(identity, Role.VENDOR)
        try:
            vendor = self.bind_vendor_slot(vendor_key, identity)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(vendor)
        return vendor

    def self_register_vendor(
        self,
        identity: UserModel,
        vendor_key: Optional[str] = None,
        company_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> VendorModel:
        """Attach a freshly registered vendor identity to a slot.

        With a key the slot is claimed and approved by the system actor. A key
        that fails the gate raises the gate's error. Without a key a new
        pending slot is created; it waits for an admin.

        Joins the caller's transaction; nothing is committed here.
        """
        if vendor_key:
            vendor = self.bind_vendor_slot(vendor_key, identity)
            if company_name:
                vendor.company_name = company_name
            if description is not None:
                vendor.description = description
            apply_transition(vendor, ApprovalAction.APPROVE, SYSTEM_ACTOR)
            self.db.flush()
            return vendor

        vendor = self._new_slot(
            company_name or f"{identity.name} {DEFAULT_VENDOR_COMPANY_SUFFIX}",
            description,
            created_by=identity.user_id,
        )
        vendor.user_id = identity.user_id
        self.db.flush()
        logger.info("Vendor %s registered without a key, pending approval", vendor.vendor_id)
        return vendor

    # --- Approval ---

    def transition_vendor(
        self,
        admin: UserModel,
        vendor_id: str,
        action: ApprovalAction,
        reason: Optional[str] = None,
    ) -> VendorModel:
        """Approve, reject or suspend a vendor.

        Raises:
            ForbiddenError: If the actor is not an admin.
            VendorNotFoundError: If the vendor does not exist.
        """
        _require_role(admin, Role.ADMIN)
        vendor = self.get_vendor(vendor_id)
        apply_transition(vendor, action, admin.user_id, reason)
        self.db.commit()
        self.db.refresh(vendor)
        return vendor
