"""Mentor database model."""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .approval import ApprovalMixin
from .base import Base


class MentorModel(ApprovalMixin, Base):
    """Mentor database model. Every mentor belongs to exactly one vendor."""

    __tablename__ = "mentors"

    mentor_id = Column(String, primary_key=True, index=True)
    mentor_key = Column(String, unique=True, index=True, nullable=False)
    vendor_id = Column(
        String, ForeignKey("vendors.vendor_id"), index=True, nullable=False
    )
    user_id = Column(String, ForeignKey("users.user_id"), unique=True, nullable=True)
    specialization = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)

    vendor = relationship("VendorModel", back_populates="mentors")
