"""User database model.

This module defines the identity shared by admins, vendors, mentors and
students.
"""

from sqlalchemy import Boolean, Column, Enum, String

from schemas.enums import Role
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(Enum(Role), nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)  # ISO format string
