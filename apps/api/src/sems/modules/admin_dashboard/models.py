"""
Admin Dashboard Models

One row per exit request an administrator has processed. Rows are
self-contained copies written by the admin client and are independent of
`exit_requests`: clearing the request history leaves the log intact.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sems.modules.shared import BaseModel


class DashboardEntry(BaseModel):
    """A processed exit request as recorded on the admin dashboard."""

    __tablename__ = "admin_dashboard_entries"

    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    student_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    student_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[str | None] = mapped_column(String(50), nullable=True)
    time: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Free-form: whatever label the admin client recorded ("approved", "Declined", ...)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    admin_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    guard_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (Index("ix_admin_dashboard_entries_processed_at", "processed_at"),)

    def __repr__(self) -> str:
        return f"<DashboardEntry {self.id} request={self.request_id} ({self.status})>"
