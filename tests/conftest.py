"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database. Managers are built on the
test session with a low bcrypt work factor so hashing stays fast.
"""
import os
import tempfile
from types import SimpleNamespace

# Must be set before config/core.database are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="edu-platform-tests-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models.base import Base
from schemas.enums import ApprovalAction, Role
from utils.course_manager import CourseManager
from utils.enrollment_manager import EnrollmentManager
from utils.mentor_manager import MentorManager
from utils.referral_manager import ReferralManager
from utils.registration_manager import RegistrationManager
from utils.student_manager import StudentManager
from utils.tenant import DefaultTenantResolver
from utils.user_manager import UserManager
from utils.vendor_manager import VendorManager

TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by all sessions of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user_manager(db):
    return UserManager(db, bcrypt_rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def referral_manager(db):
    return ReferralManager(db)


@pytest.fixture
def course_manager(db):
    return CourseManager(db)


@pytest.fixture
def vendor_manager(db, referral_manager):
    return VendorManager(db, referral_manager)


@pytest.fixture
def mentor_manager(db, vendor_manager):
    return MentorManager(db, vendor_manager, DefaultTenantResolver(db))


@pytest.fixture
def student_manager(db, referral_manager):
    return StudentManager(db, referral_manager)


@pytest.fixture
def enrollment_manager(db, referral_manager, course_manager):
    return EnrollmentManager(db, referral_manager, course_manager)


@pytest.fixture
def registration_manager(db, user_manager, vendor_manager, mentor_manager, student_manager):
    return RegistrationManager(
        db, user_manager, vendor_manager, mentor_manager, student_manager
    )


@pytest.fixture
def make_user(user_manager):
    """Factory for active identities"""
    counter = {"n": 0}

    def _make(role: Role, name: str = None):
        counter["n"] += 1
        n = counter["n"]
        return user_manager.create_user(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value}{n}@example.com",
            password="secret123",
            role=role,
            is_active=True,
        )

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, name="Platform Admin")


@pytest.fixture
def vendor_setup(admin, make_user, vendor_manager):
    """Approved vendor bound to an active vendor identity"""
    user = make_user(Role.VENDOR, name="Vera Vendor")
    vendor, referral_code = vendor_manager.create_vendor(admin, "Acme Learning")
    vendor_manager.claim_vendor_slot(vendor.vendor_key, user)
    vendor_manager.transition_vendor(admin, vendor.vendor_id, ApprovalAction.APPROVE)
    return SimpleNamespace(user=user, vendor=vendor, referral_code=referral_code)


@pytest.fixture
def mentor_setup(vendor_setup, make_user, mentor_manager):
    """Approved mentor of ``vendor_setup`` bound to an active mentor identity"""
    user = make_user(Role.MENTOR, name="Maria Mentor")
    mentor = mentor_manager.create_mentor(vendor_setup.user, "Mathematics")
    mentor_manager.claim_mentor_slot(mentor.mentor_key, user)
    mentor_manager.transition_mentor(
        vendor_setup.user, mentor.mentor_id, ApprovalAction.APPROVE
    )
    return SimpleNamespace(user=user, mentor=mentor, vendor=vendor_setup.vendor)


@pytest.fixture
def mentor_code(mentor_setup, referral_manager):
    """Unlimited referral code owned by ``mentor_setup``"""
    return referral_manager.create_mentor_code(
        mentor_setup.mentor, mentor_setup.user.name
    )


@pytest.fixture
def student(mentor_code, registration_manager, student_manager):
    """Student admitted with ``mentor_code``"""
    user, _ = registration_manager.register_student(
        name="Sam Student",
        email="sam@example.com",
        password="secret123",
        referral_code=mentor_code.code,
    )
    return student_manager.get_student_for_user(user.user_id)


@pytest.fixture
def make_course(admin, course_manager, vendor_setup):
    """Factory for active courses of ``vendor_setup``'s vendor"""

    def _make(price: float = 1000.0, discount_price: float = None, **kwargs):
        kwargs.setdefault("title", "Algebra Basics")
        kwargs.setdefault("category", "Mathematics")
        kwargs.setdefault("vendor_id", vendor_setup.vendor.vendor_id)
        return course_manager.create_course(
            admin, price=price, discount_price=discount_price, **kwargs
        )

    return _make
