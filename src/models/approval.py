"""Approval columns shared by vendors and mentors."""

from sqlalchemy import Column, Enum, String

from schemas.enums import ApprovalStatus


class ApprovalMixin:
    """Status plus approval and rejection metadata.

    ``rejection_reason`` doubles as the suspension reason.
    """

    status = Column(
        Enum(ApprovalStatus),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    approved_by = Column(String, nullable=True)
    approved_at = Column(String, nullable=True)
    rejected_by = Column(String, nullable=True)
    rejected_at = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)
