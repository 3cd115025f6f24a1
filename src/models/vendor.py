"""Vendor database model.

A vendor row is a slot: it may exist with a generated key before any user
claims it (``user_id`` is NULL until then).
"""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .approval import ApprovalMixin
from .base import Base


class VendorModel(ApprovalMixin, Base):
    """Vendor database model."""

    __tablename__ = "vendors"

    vendor_id = Column(String, primary_key=True, index=True)
    vendor_key = Column(String, unique=True, index=True, nullable=False)
    company_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    user_id = Column(String, ForeignKey("users.user_id"), unique=True, nullable=True)
    created_by = Column(String, nullable=False)  # admin user_id or the registrant
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=True)  # key validity window

    mentors = relationship("MentorModel", back_populates="vendor")
