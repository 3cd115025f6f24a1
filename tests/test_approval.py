"""
Tests for the vendor/mentor approval state machine and who may drive it.
"""
import pytest

from config import DEFAULT_REJECTION_REASON, SYSTEM_ACTOR
from core.exceptions import ForbiddenError, MentorNotFoundError, VendorNotFoundError
from models.vendor import VendorModel
from schemas.enums import ApprovalAction, ApprovalStatus, Role
from utils.approval import apply_transition


def pending_vendor() -> VendorModel:
    return VendorModel(
        vendor_id="v1",
        vendor_key="VND_0000000000000000",
        company_name="Acme",
        created_by="admin",
        created_at="2024-01-01T00:00:00+00:00",
        status=ApprovalStatus.PENDING,
    )


class TestApplyTransition:
    """Tests for apply_transition on a detached vendor row"""

    def test_approve_sets_metadata(self):
        vendor = pending_vendor()
        assert apply_transition(vendor, ApprovalAction.APPROVE, "admin-1") == ApprovalStatus.APPROVED
        assert vendor.approved_by == "admin-1"
        assert vendor.approved_at is not None

    def test_reject_clears_approval(self):
        vendor = pending_vendor()
        apply_transition(vendor, ApprovalAction.APPROVE, "admin-1")
        apply_transition(vendor, ApprovalAction.REJECT, "admin-2")
        assert vendor.status == ApprovalStatus.REJECTED
        assert vendor.approved_by is None
        assert vendor.approved_at is None
        assert vendor.rejected_by == "admin-2"
        assert vendor.rejection_reason == DEFAULT_REJECTION_REASON

    def test_approve_after_reject_clears_rejection(self):
        """No state is terminal: a rejected vendor can be approved again"""
        vendor = pending_vendor()
        apply_transition(vendor, ApprovalAction.REJECT, "admin-1", "Incomplete documents")
        apply_transition(vendor, ApprovalAction.APPROVE, "admin-1")
        assert vendor.status == ApprovalStatus.APPROVED
        assert vendor.rejected_by is None
        assert vendor.rejected_at is None
        assert vendor.rejection_reason is None

    def test_suspend_keeps_approval_metadata(self):
        vendor = pending_vendor()
        apply_transition(vendor, ApprovalAction.APPROVE, "admin-1")
        apply_transition(vendor, ApprovalAction.SUSPEND, "admin-1", "Policy violation")
        assert vendor.status == ApprovalStatus.SUSPENDED
        assert vendor.approved_by == "admin-1"
        assert vendor.rejection_reason == "Policy violation"

    def test_reapplying_is_idempotent(self):
        vendor = pending_vendor()
        apply_transition(vendor, ApprovalAction.REJECT, "admin-1", "First")
        apply_transition(vendor, ApprovalAction.REJECT, "admin-1", "First")
        assert vendor.status == ApprovalStatus.REJECTED
        assert vendor.rejection_reason == "First"

    def test_action_accepts_plain_string(self):
        vendor = pending_vendor()
        assert apply_transition(vendor, "suspend", SYSTEM_ACTOR) == ApprovalStatus.SUSPENDED

    def test_unknown_action_rejected(self):
        with pytest.raises(ValueError):
            apply_transition(pending_vendor(), "delete", "admin-1")


class TestVendorAuthority:
    """Vendor transitions are reserved to admins"""

    def test_admin_can_reject(self, admin, vendor_manager):
        vendor, _ = vendor_manager.create_vendor(admin, "Beta Tutors")
        rejected = vendor_manager.transition_vendor(
            admin, vendor.vendor_id, ApprovalAction.REJECT, "Not eligible"
        )
        assert rejected.status == ApprovalStatus.REJECTED
        assert rejected.rejected_by == admin.user_id

    def test_non_admin_forbidden(self, admin, make_user, vendor_manager):
        vendor, _ = vendor_manager.create_vendor(admin, "Beta Tutors")
        mentor_user = make_user(Role.MENTOR)
        with pytest.raises(ForbiddenError):
            vendor_manager.transition_vendor(mentor_user, vendor.vendor_id, ApprovalAction.APPROVE)

    def test_unknown_vendor(self, admin, vendor_manager):
        with pytest.raises(VendorNotFoundError):
            vendor_manager.transition_vendor(admin, "missing", ApprovalAction.APPROVE)


class TestMentorAuthority:
    """Mentor transitions are reserved to the owning vendor"""

    def test_owning_vendor_can_suspend(self, vendor_setup, mentor_setup, mentor_manager):
        mentor = mentor_manager.transition_mentor(
            vendor_setup.user, mentor_setup.mentor.mentor_id, ApprovalAction.SUSPEND
        )
        assert mentor.status == ApprovalStatus.SUSPENDED
        assert mentor.approved_by == vendor_setup.user.user_id

    def test_other_vendor_gets_not_found(
        self, admin, make_user, mentor_setup, vendor_manager, mentor_manager
    ):
        other_user = make_user(Role.VENDOR)
        other_vendor, _ = vendor_manager.create_vendor(admin, "Other Academy")
        vendor_manager.claim_vendor_slot(other_vendor.vendor_key, other_user)

        with pytest.raises(MentorNotFoundError):
            mentor_manager.transition_mentor(
                other_user, mentor_setup.mentor.mentor_id, ApprovalAction.REJECT
            )
        assert mentor_setup.mentor.status == ApprovalStatus.APPROVED

    def test_admin_is_not_the_owning_vendor(self, admin, mentor_setup, mentor_manager):
        with pytest.raises(ForbiddenError):
            mentor_manager.transition_mentor(
                admin, mentor_setup.mentor.mentor_id, ApprovalAction.REJECT
            )
