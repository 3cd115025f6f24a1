"""
Tests for the referral code ledger.

Covers:
- Validation order and distinct error kinds
- Atomic consumption under a lost race
- Active-code cap and one-way deactivation
"""
import threading
from datetime import datetime, timedelta

import pytest
import pytz
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from config import MAX_ACTIVE_REFERRAL_CODES
from core.exceptions import (
    ExhaustedReferralCodeError,
    ExpiredReferralCodeError,
    InactiveReferralCodeError,
    InvalidReferralCodeError,
    LimitReachedError,
    ReferralCodeNotFoundError,
    ValidationError,
)
from models.base import Base
from models.referral_code import ReferralCodeModel
from schemas.enums import ErrorKind, Role
from utils.referral_manager import ReferralManager


def add_code(db, code="TESTCODE12345", **kwargs) -> ReferralCodeModel:
    values = dict(
        id=code.lower(),
        code=code,
        vendor_id="vendor-1",
        mentor_id="mentor-1",
        is_active=True,
        usage_count=0,
        max_usage=None,
        created_at="2024-01-01T00:00:00+00:00",
        expires_at=None,
    )
    values.update(kwargs)
    model = ReferralCodeModel(**values)
    db.add(model)
    db.commit()
    return model


class TestValidate:
    """Tests for ReferralManager.validate"""

    def test_unknown_code(self, referral_manager):
        with pytest.raises(InvalidReferralCodeError) as exc_info:
            referral_manager.validate("NOPE")
        assert exc_info.value.kind == ErrorKind.INVALID_CODE

    def test_inactive_code(self, db, referral_manager):
        add_code(db, is_active=False)
        with pytest.raises(InactiveReferralCodeError):
            referral_manager.validate("TESTCODE12345")

    def test_expired_code(self, db, referral_manager):
        add_code(db, expires_at="2020-01-01T00:00:00+00:00")
        with pytest.raises(ExpiredReferralCodeError):
            referral_manager.validate("TESTCODE12345")

    def test_exhausted_code(self, db, referral_manager):
        add_code(db, max_usage=3, usage_count=3)
        with pytest.raises(ExhaustedReferralCodeError):
            referral_manager.validate("TESTCODE12345")

    def test_inactive_reported_before_expired_and_exhausted(self, db, referral_manager):
        add_code(
            db, is_active=False, expires_at="2020-01-01T00:00:00+00:00", max_usage=1, usage_count=1
        )
        with pytest.raises(InactiveReferralCodeError):
            referral_manager.validate("TESTCODE12345")

    def test_expired_reported_before_exhausted(self, db, referral_manager):
        add_code(db, expires_at="2020-01-01T00:00:00+00:00", max_usage=1, usage_count=1)
        with pytest.raises(ExpiredReferralCodeError):
            referral_manager.validate("TESTCODE12345")

    def test_clock_override(self, db, referral_manager):
        add_code(db, expires_at="2030-01-01T00:00:00+00:00")
        later = datetime(2031, 1, 1, tzinfo=pytz.utc)
        with pytest.raises(ExpiredReferralCodeError):
            referral_manager.validate("TESTCODE12345", now=later)

    def test_lookup_is_case_insensitive(self, db, referral_manager):
        add_code(db)
        assert referral_manager.validate(" testcode12345 ").code == "TESTCODE12345"

    def test_subtypes_share_invalid_code_family(self):
        for error in (
            InactiveReferralCodeError,
            ExpiredReferralCodeError,
            ExhaustedReferralCodeError,
        ):
            assert issubclass(error, InvalidReferralCodeError)


class TestConsume:
    """Tests for ReferralManager.consume"""

    def test_increments_usage(self, db, referral_manager):
        add_code(db, max_usage=2)
        assert referral_manager.consume("TESTCODE12345").usage_count == 1
        db.commit()
        assert referral_manager.consume("TESTCODE12345").usage_count == 2
        db.commit()
        with pytest.raises(ExhaustedReferralCodeError):
            referral_manager.consume("TESTCODE12345")

    def test_does_not_commit(self, db, referral_manager):
        add_code(db)
        referral_manager.consume("TESTCODE12345")
        db.rollback()
        assert referral_manager.get_by_code("TESTCODE12345").usage_count == 0

    def test_unlimited_code(self, db, referral_manager):
        add_code(db)
        for _ in range(25):
            referral_manager.consume("TESTCODE12345")
        db.commit()
        assert referral_manager.get_by_code("TESTCODE12345").usage_count == 25


class TestConcurrentConsumption:
    """Two sessions racing for the last use of a code"""

    @pytest.fixture
    def file_sessions(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        Base.metadata.create_all(bind=engine)
        factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        first, second = factory(), factory()
        yield first, second
        first.close()
        second.close()
        engine.dispose()

    def test_last_use_goes_to_one_session(self, file_sessions):
        """Both sessions validate; only the first UPDATE may succeed"""
        session_a, session_b = file_sessions
        add_code(session_a, max_usage=1)
        ledger_a, ledger_b = ReferralManager(session_a), ReferralManager(session_b)

        ledger_a.validate("TESTCODE12345")
        ledger_b.validate("TESTCODE12345")

        ledger_a.consume("TESTCODE12345")
        session_a.commit()

        with pytest.raises(ExhaustedReferralCodeError):
            ledger_b.consume("TESTCODE12345")
        session_b.rollback()

        assert ledger_b.get_by_code("TESTCODE12345").usage_count == 1

    def test_deactivation_wins_over_stale_validation(self, file_sessions):
        session_a, session_b = file_sessions
        add_code(session_a)
        ledger_b = ReferralManager(session_b)
        ledger_b.validate("TESTCODE12345")

        code = ReferralManager(session_a).get_by_code("TESTCODE12345")
        code.is_active = False
        session_a.commit()

        with pytest.raises(InactiveReferralCodeError):
            ledger_b.consume("TESTCODE12345")
        session_b.rollback()

    @pytest.fixture
    def serialized_factory(self, tmp_path):
        """Sessions whose transactions take the SQLite write lock up front"""
        engine = create_engine(
            f"sqlite:///{tmp_path / 'threads.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        Base.metadata.create_all(bind=engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
        engine.dispose()

    def test_threads_racing_for_limited_code(self, serialized_factory):
        """Exactly max_usage of the concurrent attempts succeed"""
        setup = serialized_factory()
        add_code(setup, max_usage=3)
        setup.close()

        attempts = 10
        barrier = threading.Barrier(attempts)
        outcomes = []

        def use_code():
            session = serialized_factory()
            try:
                barrier.wait()
                ReferralManager(session).consume("TESTCODE12345")
                session.commit()
                outcomes.append("ok")
            except ExhaustedReferralCodeError:
                session.rollback()
                outcomes.append("exhausted")
            finally:
                session.close()

        threads = [threading.Thread(target=use_code) for _ in range(attempts)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 3
        assert outcomes.count("exhausted") == attempts - 3

        check = serialized_factory()
        assert ReferralManager(check).get_by_code("TESTCODE12345").usage_count == 3
        check.close()


class TestCreateMentorCode:
    """Tests for mentor code creation"""

    def test_creates_active_code(self, mentor_setup, referral_manager):
        code = referral_manager.create_mentor_code(
            mentor_setup.mentor, "Maria Mentor", max_usage=50
        )
        assert len(code.code) == 13
        assert code.code.startswith("MAR")
        assert code.is_active is True
        assert code.usage_count == 0
        assert code.max_usage == 50
        assert code.mentor_id == mentor_setup.mentor.mentor_id
        assert code.vendor_id == mentor_setup.vendor.vendor_id

    def test_active_cap(self, mentor_setup, referral_manager):
        for _ in range(MAX_ACTIVE_REFERRAL_CODES):
            referral_manager.create_mentor_code(mentor_setup.mentor, "Maria")
        with pytest.raises(LimitReachedError):
            referral_manager.create_mentor_code(mentor_setup.mentor, "Maria")

    def test_deactivating_frees_a_slot(self, mentor_setup, referral_manager):
        codes = [
            referral_manager.create_mentor_code(mentor_setup.mentor, "Maria")
            for _ in range(MAX_ACTIVE_REFERRAL_CODES)
        ]
        referral_manager.deactivate(mentor_setup.mentor, codes[0].code)
        assert referral_manager.create_mentor_code(mentor_setup.mentor, "Maria").is_active

    def test_rejects_non_positive_limit(self, mentor_setup, referral_manager):
        with pytest.raises(ValidationError):
            referral_manager.create_mentor_code(mentor_setup.mentor, "Maria", max_usage=0)

    def test_rejects_past_expiry(self, mentor_setup, referral_manager):
        yesterday = datetime.now(pytz.utc) - timedelta(days=1)
        with pytest.raises(ValidationError):
            referral_manager.create_mentor_code(
                mentor_setup.mentor, "Maria", expires_at=yesterday
            )

    def test_future_expiry_stored(self, mentor_setup, referral_manager):
        next_week = datetime.now(pytz.utc) + timedelta(days=7)
        code = referral_manager.create_mentor_code(
            mentor_setup.mentor, "Maria", expires_at=next_week
        )
        assert code.expires_at == next_week.isoformat()


class TestDeactivate:
    """Tests for one-way deactivation"""

    def test_owner_deactivates(self, mentor_setup, mentor_code, referral_manager):
        code = referral_manager.deactivate(mentor_setup.mentor, mentor_code.code)
        assert code.is_active is False
        with pytest.raises(InactiveReferralCodeError):
            referral_manager.validate(mentor_code.code)

    def test_deactivating_twice_is_harmless(self, mentor_setup, mentor_code, referral_manager):
        referral_manager.deactivate(mentor_setup.mentor, mentor_code.code)
        assert referral_manager.deactivate(mentor_setup.mentor, mentor_code.code).is_active is False

    def test_other_mentor_gets_not_found(
        self, vendor_setup, mentor_code, make_user, mentor_manager, referral_manager
    ):
        other_user = make_user(Role.MENTOR)
        other = mentor_manager.create_mentor(vendor_setup.user)
        mentor_manager.claim_mentor_slot(other.mentor_key, other_user)

        with pytest.raises(ReferralCodeNotFoundError):
            referral_manager.deactivate(other, mentor_code.code)
        assert referral_manager.get_by_code(mentor_code.code).is_active is True

    def test_vendor_code_cannot_be_deactivated_by_mentor(
        self, mentor_setup, vendor_setup, referral_manager
    ):
        with pytest.raises(ReferralCodeNotFoundError):
            referral_manager.deactivate(mentor_setup.mentor, vendor_setup.referral_code.code)


class TestListing:
    def test_mentor_codes_newest_first(self, mentor_setup, referral_manager):
        first = referral_manager.create_mentor_code(mentor_setup.mentor, "Maria")
        second = referral_manager.create_mentor_code(mentor_setup.mentor, "Maria")
        codes = [c.code for c in referral_manager.list_for_mentor(mentor_setup.mentor.mentor_id)]
        assert set(codes) == {first.code, second.code}
        assert codes[0] == second.code
