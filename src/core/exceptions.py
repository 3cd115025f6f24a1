"""Custom exception classes for the education platform backend.

Every domain failure is an explicit exception subclass carrying an
``ErrorKind`` and the HTTP status the API layer answers with. Managers raise
these; the exception handler registered in ``app.py`` renders them.
"""

from typing import Optional

from schemas.enums import ErrorKind


class PlatformError(Exception):
    """Base exception for all platform errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Human readable message. Falls back to the class default.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PlatformError):
    """Raised when input is missing or malformed."""

    kind = ErrorKind.VALIDATION
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(PlatformError):
    """Raised when the caller could not be authenticated."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401
    default_message = "Invalid authentication credentials"


class ForbiddenError(PlatformError):
    """Raised when the caller's role does not allow the operation."""

    kind = ErrorKind.FORBIDDEN
    status_code = 403
    default_message = "You are not allowed to perform this action"


# --- Not found ---


class NotFoundError(PlatformError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Resource not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class VendorNotFoundError(NotFoundError):
    default_message = "Vendor not found"


class MentorNotFoundError(NotFoundError):
    default_message = "Mentor not found"


class StudentNotFoundError(NotFoundError):
    default_message = "Student profile not found"


class CourseNotFoundError(NotFoundError):
    default_message = "Course not found"


class ReferralCodeNotFoundError(NotFoundError):
    default_message = "Referral code not found"


# --- Conflicts ---


class ConflictError(PlatformError):
    status_code = 409


class AlreadyClaimedError(ConflictError):
    """Raised when a vendor or mentor slot is already bound to an identity."""

    kind = ErrorKind.ALREADY_CLAIMED
    default_message = "An account already exists for this key"


class AlreadyEnrolledError(ConflictError):
    kind = ErrorKind.ALREADY_ENROLLED
    default_message = "Already enrolled in this course"


class EmailAlreadyRegisteredError(ConflictError):
    kind = ErrorKind.ALREADY_REGISTERED
    default_message = "Email already exists"


class KeyExpiredError(ConflictError):
    kind = ErrorKind.KEY_EXPIRED
    default_message = "Vendor key has expired"


class LimitReachedError(ConflictError):
    kind = ErrorKind.LIMIT_REACHED
    default_message = "Limit reached"


# --- Referral codes ---


class InvalidReferralCodeError(PlatformError):
    """Raised when a referral code cannot be used.

    Subclasses narrow down the reason; catching this class catches them all.
    """

    kind = ErrorKind.INVALID_CODE
    status_code = 400
    default_message = "Invalid referral code"


class InactiveReferralCodeError(InvalidReferralCodeError):
    kind = ErrorKind.INACTIVE_CODE
    default_message = "Referral code is not active"


class ExpiredReferralCodeError(InvalidReferralCodeError):
    kind = ErrorKind.EXPIRED_CODE
    default_message = "Referral code has expired"


class ExhaustedReferralCodeError(InvalidReferralCodeError):
    kind = ErrorKind.EXHAUSTED_CODE
    default_message = "Referral code has reached its maximum usage"


# --- Infrastructure ---


class KeyGenerationExhaustedError(PlatformError):
    """Raised when no unique identifier was found within the attempt budget."""

    kind = ErrorKind.EXHAUSTED
    status_code = 500
    default_message = "Failed to generate a unique key. Please try again."
