"""
Notification Outbox Models

Each row is one email to send. Rows are written in the same transaction as
the exit-request change they describe and are delivered afterwards, so a
failed send never undoes the change.
"""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from sems.modules.shared import BaseModel


class NotificationKind(str, enum.Enum):
    """Email templates."""

    TEACHER_NEW_REQUEST = "teacher_new_request"
    ADMIN_NEW_REQUEST = "admin_new_request"
    TEACHER_DECISION_CONFIRMATION = "teacher_decision_confirmation"
    SECURITY_ALERT = "security_alert"


class IntentStatus(str, enum.Enum):
    """Delivery state of an outbox row."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationIntent(BaseModel):
    """A queued email."""

    __tablename__ = "notification_outbox"

    # No foreign key: clearing the request history must not be blocked by outbox rows
    exit_request_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    template_kind: Mapped[NotificationKind] = mapped_column(
        Enum(
            NotificationKind,
            name="notification_kind",
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
    )
    template_args: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[IntentStatus] = mapped_column(
        Enum(
            IntentStatus,
            name="notification_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=IntentStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_attempt_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_outbox_status_next_attempt", "status", "next_attempt_at"),
        Index("ix_notification_outbox_exit_request_id", "exit_request_id"),
    )

    def __repr__(self) -> str:
        return f"<NotificationIntent {self.id} {self.template_kind.value} ({self.status.value})>"
