"""Configuration module for the education platform backend.

This module provides centralized configuration management, including directory
paths, database and API server settings, authentication, and the onboarding
and referral policy defaults. All configuration values can be overridden via
environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# --- Database Configuration ---

# Any SQLAlchemy URL; defaults to a SQLite file inside DATA_DIR
DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/edu_platform.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))
)

# Platform admin credentials; the admin identity is created on first login
ADMIN_EMAIL: Optional[str] = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")
ADMIN_DISPLAY_NAME: str = os.getenv("ADMIN_DISPLAY_NAME", "Platform Admin")

# One-time passwords for email verification
OTP_TTL_MINUTES: int = int(os.getenv("OTP_TTL_MINUTES", "10"))
OTP_LENGTH: int = 6

# --- Onboarding Configuration ---

# Validity window of a vendor key created by an admin
VENDOR_KEY_TTL_HOURS: int = int(os.getenv("VENDOR_KEY_TTL_HOURS", "24"))

# Attempts allowed when generating a unique vendor key, mentor key or referral code
KEY_GENERATION_MAX_ATTEMPTS: int = int(os.getenv("KEY_GENERATION_MAX_ATTEMPTS", "5"))

# Company name used for self-registered vendors that did not provide one
DEFAULT_VENDOR_COMPANY_SUFFIX: str = os.getenv(
    "DEFAULT_VENDOR_COMPANY_SUFFIX", "Academy"
)

# Company name of the vendor created when a mentor self-registers and no
# approved vendor exists yet
DEFAULT_VENDOR_COMPANY_NAME: str = os.getenv(
    "DEFAULT_VENDOR_COMPANY_NAME", "Platform Default Vendor"
)

# Approver recorded for automatic approvals
SYSTEM_ACTOR: str = "SYSTEM"

DEFAULT_REJECTION_REASON: str = "No reason provided"
DEFAULT_SUSPENSION_REASON: str = "Suspended by administrator"

# --- Referral Configuration ---

# Maximum number of simultaneously active referral codes per mentor
MAX_ACTIVE_REFERRAL_CODES: int = int(os.getenv("MAX_ACTIVE_REFERRAL_CODES", "5"))

# Usage limit of the referral code created together with a vendor
DEFAULT_VENDOR_REFERRAL_MAX_USAGE: int = int(
    os.getenv("DEFAULT_VENDOR_REFERRAL_MAX_USAGE", "10")
)

# --- Payment Configuration ---

PAYMENT_GATEWAY: str = "dummy"
