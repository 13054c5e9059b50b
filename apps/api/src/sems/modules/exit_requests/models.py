"""
Exit Request Models

A student's request to leave campus, with the admin and teacher approval
sub-states stored as flattened columns.

Identity, course and year level are snapshots copied from the student
account at submission time and are never re-synced.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sems.modules.shared import BaseModel


class RequestStatus(str, enum.Enum):
    """Status of an exit request."""

    PENDING = "pending"
    ADMIN_APPROVED = "admin_approved"
    TEACHER_APPROVED = "teacher_approved"
    FULLY_APPROVED = "fully_approved"
    DECLINED = "declined"


class ExitRequest(BaseModel):
    """A student exit request awaiting or holding admin and teacher decisions."""

    __tablename__ = "exit_requests"

    # Requester snapshot
    student_id: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    course: Mapped[str] = mapped_column(String(50), nullable=False)
    year_level: Mapped[str] = mapped_column(String(50), nullable=False)

    # Request details (free-form, as entered by the student)
    reason_for_exit: Mapped[str] = mapped_column(Text, nullable=False)
    exit_date: Mapped[str] = mapped_column(String(50), nullable=False)
    exit_time: Mapped[str] = mapped_column(String(50), nullable=False)
    emergency_contact: Mapped[str] = mapped_column(String(100), nullable=False)
    guard_name: Mapped[str] = mapped_column(String(200), nullable=False)

    status: Mapped[RequestStatus] = mapped_column(
        Enum(
            RequestStatus,
            name="exit_request_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Admin approval
    admin_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_response: Mapped[str] = mapped_column(Text, nullable=False, default="")
    admin_responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Teacher approval
    teacher_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    teacher_id: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    teacher_response: Mapped[str] = mapped_column(Text, nullable=False, default="")
    teacher_responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_exit_requests_student_id", "student_id"),
        Index("ix_exit_requests_course_status", "course", "status"),
        Index("ix_exit_requests_submitted_at", "submitted_at"),
    )

    @property
    def student_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<ExitRequest {self.id} {self.student_id} ({self.status.value})>"
