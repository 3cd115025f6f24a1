"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel
from .otp import OTPModel
from .vendor import VendorModel
from .mentor import MentorModel
from .student import StudentModel, StudentCourseModel
from .course import CourseModel
from .referral_code import ReferralCodeModel
from .enrollment import EnrollmentModel
from .payment import PaymentModel

__all__ = [
    "Base",
    "UserModel",
    "OTPModel",
    "VendorModel",
    "MentorModel",
    "StudentModel",
    "StudentCourseModel",
    "CourseModel",
    "ReferralCodeModel",
    "EnrollmentModel",
    "PaymentModel",
]
