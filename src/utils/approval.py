"""Approval state machine for vendors and mentors.

States are PENDING, APPROVED, REJECTED and SUSPENDED. Every action is allowed
from every state, re-applying an action is idempotent apart from refreshed
timestamps, and no state is terminal. Callers enforce who may act; this
module only mutates the row (flush and commit stay with the caller).
"""

import logging
from typing import Callable, Dict, Optional, Union

from config import DEFAULT_REJECTION_REASON, DEFAULT_SUSPENSION_REASON
from models.mentor import MentorModel
from models.vendor import VendorModel
from schemas.enums import ApprovalAction, ApprovalStatus
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)

ApprovalSubject = Union[VendorModel, MentorModel]


def approve(subject: ApprovalSubject, actor_id: str, reason: Optional[str] = None) -> None:
    subject.status = ApprovalStatus.APPROVED
    subject.approved_by = actor_id
    subject.approved_at = now_iso()
    subject.rejected_by = None
    subject.rejected_at = None
    subject.rejection_reason = None


def reject(subject: ApprovalSubject, actor_id: str, reason: Optional[str] = None) -> None:
    subject.status = ApprovalStatus.REJECTED
    subject.rejected_by = actor_id
    subject.rejected_at = now_iso()
    subject.rejection_reason = reason or DEFAULT_REJECTION_REASON
    subject.approved_by = None
    subject.approved_at = None


def suspend(subject: ApprovalSubject, actor_id: str, reason: Optional[str] = None) -> None:
    # Approval metadata stays in place
    subject.status = ApprovalStatus.SUSPENDED
    subject.rejection_reason = reason or DEFAULT_SUSPENSION_REASON


TRANSITIONS: Dict[ApprovalAction, Callable[[ApprovalSubject, str, Optional[str]], None]] = {
    ApprovalAction.APPROVE: approve,
    ApprovalAction.REJECT: reject,
    ApprovalAction.SUSPEND: suspend,
}


def apply_transition(
    subject: ApprovalSubject,
    action: ApprovalAction,
    actor_id: str,
    reason: Optional[str] = None,
) -> ApprovalStatus:
    """Apply ``action`` to ``subject`` and return the resulting status.

    Args:
        subject: Vendor or mentor row.
        action: Transition to apply.
        actor_id: user_id of the acting admin/vendor, or the system actor.
        reason: Rejection or suspension reason; ignored when approving.

    Returns:
        The new status.
    """
    action = ApprovalAction(action)
    previous = subject.status
    TRANSITIONS[action](subject, actor_id, reason)
    logger.info(
        "%s %s: %s -> %s by %s",
        type(subject).__name__,
        action.value,
        previous.value if isinstance(previous, ApprovalStatus) else previous,
        subject.status.value,
        actor_id,
    )
    return subject.status
