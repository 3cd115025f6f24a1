"""Referral code ledger.

The ledger is the only authority on whether a referral code can be used right
now. Validation fails fast in a fixed order (exists, active, not expired,
capacity left) and consumption is a single conditional UPDATE, so concurrent
uses of the same code can never push ``usage_count`` past ``max_usage``.
Consumption joins the caller's transaction and never commits by itself.
"""

import logging
import uuid
from datetime import datetime
from functools import partial
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from config import MAX_ACTIVE_REFERRAL_CODES
from core.exceptions import (
    ExhaustedReferralCodeError,
    ExpiredReferralCodeError,
    InactiveReferralCodeError,
    InvalidReferralCodeError,
    LimitReachedError,
    ReferralCodeNotFoundError,
    ValidationError,
)
from models.mentor import MentorModel
from models.referral_code import ReferralCodeModel
from models.vendor import VendorModel
from utils.keygen import generate_referral_code, generate_unique
from utils.timeutils import is_expired, now_iso, to_iso, utc_now

logger = logging.getLogger(__name__)


def is_exhausted(model: ReferralCodeModel) -> bool:
    return model.max_usage is not None and model.usage_count >= model.max_usage


class ReferralManager:
    """Manages referral code creation, validation and consumption."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> Optional[ReferralCodeModel]:
        return (
            self.db.query(ReferralCodeModel)
            .filter(ReferralCodeModel.code == code.strip().upper())
            .first()
        )

    def code_exists(self, code: str) -> bool:
        return self.get_by_code(code) is not None

    # --- Validation and consumption ---

    def validate(self, code: str, now: Optional[datetime] = None) -> ReferralCodeModel:
        """Check that ``code`` can be used right now.

        Args:
            code: Referral code string.
            now: Clock override for expiry checks.

        Returns:
            The referral code row.

        Raises:
            InvalidReferralCodeError: If the code does not exist.
            InactiveReferralCodeError: If the code was deactivated.
            ExpiredReferralCodeError: If the code is past its expiry.
            ExhaustedReferralCodeError: If the code reached its usage limit.
        """
        model = self.get_by_code(code) if code else None
        if model is None:
            raise InvalidReferralCodeError()
        if not model.is_active:
            raise InactiveReferralCodeError()
        if is_expired(model.expires_at, now):
            raise ExpiredReferralCodeError()
        if is_exhausted(model):
            raise ExhaustedReferralCodeError()
        return model

    def consume(self, code: str, now: Optional[datetime] = None) -> ReferralCodeModel:
        """Validate ``code`` and count one use of it.

        The increment is conditional on the row still being active and below
        its limit at write time; losing that race is reported the same way
        as failing validation.

        Returns:
            The referral code row with the incremented ``usage_count``.
        """
        model = self.validate(code, now)
        result = self.db.execute(
            update(ReferralCodeModel)
            .where(
                ReferralCodeModel.id == model.id,
                ReferralCodeModel.is_active.is_(True),
                or_(
                    ReferralCodeModel.max_usage.is_(None),
                    ReferralCodeModel.usage_count < ReferralCodeModel.max_usage,
                ),
            )
            .values(usage_count=ReferralCodeModel.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(model)
        if result.rowcount != 1:
            logger.warning("Referral code %s lost a concurrent use", model.code)
            if not model.is_active:
                raise InactiveReferralCodeError()
            raise ExhaustedReferralCodeError()

        logger.info(
            "Referral code %s used (%d/%s)",
            model.code,
            model.usage_count,
            model.max_usage if model.max_usage is not None else "unlimited",
        )
        return model

    # --- Creation ---

    def _check_limits(
        self, max_usage: Optional[int], expires_at: Optional[datetime]
    ) -> Optional[str]:
        if max_usage is not None and max_usage < 1:
            raise ValidationError("max_usage must be a positive integer")
        if expires_at is None:
            return None
        expires_iso = to_iso(expires_at)
        if is_expired(expires_iso, utc_now()):
            raise ValidationError("expires_at must be in the future")
        return expires_iso

    def _new_code(
        self,
        name: Optional[str],
        entity_id: str,
        vendor_id: str,
        mentor_id: Optional[str],
        max_usage: Optional[int],
        expires_at: Optional[datetime],
    ) -> ReferralCodeModel:
        expires_iso = self._check_limits(max_usage, expires_at)
        code = generate_unique(
            partial(generate_referral_code, name, entity_id),
            self.code_exists,
            label="referral code",
        )
        model = ReferralCodeModel(
            id=uuid.uuid4().hex,
            code=code,
            vendor_id=vendor_id,
            mentor_id=mentor_id,
            is_active=True,
            usage_count=0,
            max_usage=max_usage,
            created_at=now_iso(),
            expires_at=expires_iso,
        )
        self.db.add(model)
        self.db.flush()
        return model

    def add_vendor_code(
        self,
        vendor: VendorModel,
        max_usage: Optional[int] = None,
        expires_at: Optional[datetime] = None,
    ) -> ReferralCodeModel:
        """Add a vendor-scoped code to the current transaction."""
        model = self._new_code(
            vendor.company_name, vendor.vendor_id, vendor.vendor_id, None,
            max_usage, expires_at,
        )
        logger.info("Created vendor referral code %s for vendor %s", model.code, vendor.vendor_id)
        return model

    def create_vendor_code(
        self,
        vendor: VendorModel,
        max_usage: Optional[int] = None,
        expires_at: Optional[datetime] = None,
    ) -> ReferralCodeModel:
        try:
            model = self.add_vendor_code(vendor, max_usage, expires_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(model)
        return model

    def count_active_for_mentor(self, mentor_id: str) -> int:
        return (
            self.db.query(ReferralCodeModel)
            .filter(
                ReferralCodeModel.mentor_id == mentor_id,
                ReferralCodeModel.is_active.is_(True),
            )
            .count()
        )

    def create_mentor_code(
        self,
        mentor: MentorModel,
        owner_name: Optional[str],
        max_usage: Optional[int] = None,
        expires_at: Optional[datetime] = None,
    ) -> ReferralCodeModel:
        """Create a referral code owned by ``mentor``.

        Args:
            mentor: Owning mentor.
            owner_name: Mentor's display name, embedded in the code.
            max_usage: Usage limit, None for unlimited.
            expires_at: Expiry, None for never.

        Returns:
            The committed referral code row.

        Raises:
            LimitReachedError: If the mentor already holds the maximum number
                of active codes.
            ValidationError: On a non-positive limit or a past expiry.
        """
        active = self.count_active_for_mentor(mentor.mentor_id)
        if active >= MAX_ACTIVE_REFERRAL_CODES:
            raise LimitReachedError(
                f"You can only have {MAX_ACTIVE_REFERRAL_CODES} active referral codes "
                "at a time. Please deactivate old codes first."
            )
        try:
            model = self._new_code(
                owner_name, mentor.mentor_id, mentor.vendor_id, mentor.mentor_id,
                max_usage, expires_at,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(model)
        logger.info("Mentor %s created referral code %s", mentor.mentor_id, model.code)
        return model

    # --- Lifecycle ---

    def deactivate(self, mentor: MentorModel, code: str) -> ReferralCodeModel:
        """Deactivate one of ``mentor``'s codes. There is no way back.

        Raises:
            ReferralCodeNotFoundError: If the code does not exist or belongs
                to another mentor.
        """
        model = self.get_by_code(code)
        if model is None or model.mentor_id != mentor.mentor_id:
            raise ReferralCodeNotFoundError()
        if model.is_active:
            model.is_active = False
            self.db.commit()
            self.db.refresh(model)
            logger.info("Deactivated referral code %s", model.code)
        return model

    def list_for_mentor(self, mentor_id: str) -> List[ReferralCodeModel]:
        return (
            self.db.query(ReferralCodeModel)
            .filter(ReferralCodeModel.mentor_id == mentor_id)
            .order_by(ReferralCodeModel.created_at.desc())
            .all()
        )

    def list_for_vendor(self, vendor_id: str) -> List[ReferralCodeModel]:
        return (
            self.db.query(ReferralCodeModel)
            .filter(ReferralCodeModel.vendor_id == vendor_id)
            .order_by(ReferralCodeModel.created_at.desc())
            .all()
        )
