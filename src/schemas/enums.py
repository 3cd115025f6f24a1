"""Enums shared across models, schemas and managers."""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    VENDOR = "vendor"
    MENTOR = "mentor"
    STUDENT = "student"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SUSPEND = "suspend"


class PaymentMethod(str, Enum):
    CARD = "card"
    UPI = "upi"
    WALLET = "wallet"
    NETBANKING = "netbanking"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CourseLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    ALREADY_CLAIMED = "already_claimed"
    ALREADY_ENROLLED = "already_enrolled"
    ALREADY_REGISTERED = "already_registered"
    KEY_EXPIRED = "key_expired"
    LIMIT_REACHED = "limit_reached"
    INVALID_CODE = "invalid_code"
    INACTIVE_CODE = "inactive_code"
    EXPIRED_CODE = "expired_code"
    EXHAUSTED_CODE = "exhausted_code"
    EXHAUSTED = "exhausted"
    UNEXPECTED = "unexpected"
