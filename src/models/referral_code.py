"""Referral code database model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from .base import Base


class ReferralCodeModel(Base):
    """Referral code ledger row.

    ``max_usage`` NULL means unlimited and ``expires_at`` NULL means the code
    never expires. ``mentor_id`` is NULL for vendor-scoped codes.
    """

    __tablename__ = "referral_codes"

    id = Column(String, primary_key=True, index=True)
    code = Column(String, unique=True, index=True, nullable=False)
    vendor_id = Column(
        String, ForeignKey("vendors.vendor_id"), index=True, nullable=False
    )
    mentor_id = Column(
        String, ForeignKey("mentors.mentor_id"), index=True, nullable=True
    )
    is_active = Column(Boolean, nullable=False, default=True)
    usage_count = Column(Integer, nullable=False, default=0)
    max_usage = Column(Integer, nullable=True)
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=True)
