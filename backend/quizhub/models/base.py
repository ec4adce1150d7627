"""Shared columns and helpers for all entities."""

from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import JSON, Column, DateTime, Enum, String
from sqlalchemy.dialects.postgresql import JSONB

from quizhub.common.object_id import new_object_id

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityMixin:
    """Common base columns: id, creator/owner and lifecycle timestamps."""

    id = Column(String(24), primary_key=True, default=new_object_id)
    creator_id = Column(String(24), nullable=True, index=True)
    owner_id = Column(String(24), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft-delete marker

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()


class ApprovalStatus(str, PyEnum):
    """Approval state of a category or question."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"


class ApprovableMixin:
    """Approval state machine.

    Pending entities are owned by their creator; approved entities have no owner.
    approve() and revoke_approval() are the only mutators of the state.
    """

    approval_status = Column(
        Enum(ApprovalStatus, name="approval_status", native_enum=False),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED

    def approve(self) -> None:
        self.approval_status = ApprovalStatus.APPROVED
        self.owner_id = None

    def revoke_approval(self) -> None:
        self.approval_status = ApprovalStatus.PENDING
        self.owner_id = self.creator_id

    def toggle_approval(self) -> bool:
        """Flip the approval state; returns the new is_approved value."""
        if self.is_approved:
            self.revoke_approval()
        else:
            self.approve()
        return self.is_approved
