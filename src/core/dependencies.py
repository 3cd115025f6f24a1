"""Dependency injection module for FastAPI.

Every manager is built per request on the request-scoped DB session. Managers
that compose others share that session, so a registration or an enrollment
commits as one transaction.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import course_manager
from utils import enrollment_manager
from utils import mailer
from utils import mentor_manager
from utils import referral_manager
from utils import registration_manager
from utils import student_manager
from utils import tenant
from utils import user_manager
from utils import vendor_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_referral_manager(
    db: Session = Depends(get_db),
) -> referral_manager.ReferralManager:
    """Get ReferralManager instance with request-scoped DB session."""
    return referral_manager.ReferralManager(db)


def get_course_manager(db: Session = Depends(get_db)) -> course_manager.CourseManager:
    return course_manager.CourseManager(db)


def get_otp_mailer() -> mailer.OTPMailer:
    return mailer.OTPMailer()


def get_tenant_resolver(db: Session = Depends(get_db)) -> tenant.DefaultTenantResolver:
    return tenant.DefaultTenantResolver(db)


def get_vendor_manager(
    db: Session = Depends(get_db),
    referrals: referral_manager.ReferralManager = Depends(get_referral_manager),
) -> vendor_manager.VendorManager:
    """Get VendorManager instance with request-scoped DB session."""
    return vendor_manager.VendorManager(db, referrals)


def get_mentor_manager(
    db: Session = Depends(get_db),
    vendors: vendor_manager.VendorManager = Depends(get_vendor_manager),
    resolver: tenant.DefaultTenantResolver = Depends(get_tenant_resolver),
) -> mentor_manager.MentorManager:
    """Get MentorManager instance with request-scoped DB session."""
    return mentor_manager.MentorManager(db, vendors, resolver)


def get_student_manager(
    db: Session = Depends(get_db),
    referrals: referral_manager.ReferralManager = Depends(get_referral_manager),
) -> student_manager.StudentManager:
    return student_manager.StudentManager(db, referrals)


def get_enrollment_manager(
    db: Session = Depends(get_db),
    referrals: referral_manager.ReferralManager = Depends(get_referral_manager),
    courses: course_manager.CourseManager = Depends(get_course_manager),
) -> enrollment_manager.EnrollmentManager:
    """Get EnrollmentManager instance with request-scoped DB session."""
    return enrollment_manager.EnrollmentManager(db, referrals, courses)


def get_registration_manager(
    db: Session = Depends(get_db),
    users: user_manager.UserManager = Depends(get_user_manager),
    vendors: vendor_manager.VendorManager = Depends(get_vendor_manager),
    mentors: mentor_manager.MentorManager = Depends(get_mentor_manager),
    students: student_manager.StudentManager = Depends(get_student_manager),
) -> registration_manager.RegistrationManager:
    """Get RegistrationManager composed from the other request-scoped managers."""
    return registration_manager.RegistrationManager(
        db, users, vendors, mentors, students
    )


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
ReferralManagerDep = Annotated[
    referral_manager.ReferralManager, Depends(get_referral_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
VendorManagerDep = Annotated[
    vendor_manager.VendorManager, Depends(get_vendor_manager)
]
MentorManagerDep = Annotated[
    mentor_manager.MentorManager, Depends(get_mentor_manager)
]
StudentManagerDep = Annotated[
    student_manager.StudentManager, Depends(get_student_manager)
]
EnrollmentManagerDep = Annotated[
    enrollment_manager.EnrollmentManager, Depends(get_enrollment_manager)
]
RegistrationManagerDep = Annotated[
    registration_manager.RegistrationManager, Depends(get_registration_manager)
]
OTPMailerDep = Annotated[mailer.OTPMailer, Depends(get_otp_mailer)]
