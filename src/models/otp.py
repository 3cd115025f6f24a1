"""One-time password model used for email verification."""

from sqlalchemy import Column, Integer, String

from .base import Base


class OTPModel(Base):
    __tablename__ = "otps"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, index=True, nullable=False)
    otp_hash = Column(String, nullable=False)  # bcrypt hash, never the plain code
    purpose = Column(String, nullable=False, default="registration")
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=False)
