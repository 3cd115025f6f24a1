"""Default tenant resolution for mentors that self-register without a key."""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from config import DEFAULT_VENDOR_COMPANY_NAME, SYSTEM_ACTOR
from models.vendor import VendorModel
from schemas.enums import ApprovalAction, ApprovalStatus
from utils.approval import apply_transition
from utils.keygen import generate_unique, generate_vendor_key
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)


class DefaultTenantResolver:
    """Picks the vendor a keyless mentor registration attaches to.

    The oldest approved vendor wins. When there is none, an approved
    platform vendor is created inside the caller's transaction.
    """

    def __init__(self, db: Session, company_name: str = DEFAULT_VENDOR_COMPANY_NAME):
        self.db = db
        self.company_name = company_name

    def find(self) -> Optional[VendorModel]:
        return (
            self.db.query(VendorModel)
            .filter(VendorModel.status == ApprovalStatus.APPROVED)
            .order_by(VendorModel.created_at.asc())
            .first()
        )

    def resolve(self) -> VendorModel:
        vendor = self.find()
        if vendor is not None:
            return vendor

        vendor_key = generate_unique(
            generate_vendor_key,
            lambda key: self.db.query(VendorModel)
            .filter(VendorModel.vendor_key == key)
            .first()
            is not None,
            label="vendor key",
        )
        vendor = VendorModel(
            vendor_id=uuid.uuid4().hex,
            vendor_key=vendor_key,
            company_name=self.company_name,
            description="Default vendor for mentors registering without a key",
            created_by=SYSTEM_ACTOR,
            created_at=now_iso(),
            status=ApprovalStatus.PENDING,
        )
        apply_transition(vendor, ApprovalAction.APPROVE, SYSTEM_ACTOR)
        self.db.add(vendor)
        self.db.flush()
        logger.info("Created default vendor %s", vendor.vendor_id)
        return vendor
