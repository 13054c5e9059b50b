"""
Admin Dashboard Schemas

Same camelCase JSON conventions as the exit request endpoints.
"""

from datetime import datetime

from pydantic import Field

from sems.modules.admin_dashboard.models import DashboardEntry
from sems.modules.exit_requests.schemas import CamelModel


class DashboardEntryCreate(CamelModel):
    """A processed request as posted by the admin client. Every field is optional."""

    request_id: str | None = Field(None, max_length=64)
    student_name: str | None = Field(None, max_length=200)
    student_id: str | None = Field(None, alias="studentID", max_length=50)
    reason: str | None = Field(None, max_length=2000)
    date: str | None = Field(None, max_length=50)
    time: str | None = Field(None, max_length=50)
    status: str | None = Field(None, max_length=50)
    admin_response: str | None = Field(None, max_length=2000)
    processed_at: datetime | None = None
    guard_name: str | None = Field(None, max_length=200)
    emergency_contact: str | None = Field(None, max_length=100)


class DashboardEntryResponse(CamelModel):
    id: str
    request_id: str | None
    student_name: str | None
    student_id: str | None = Field(..., alias="studentID")
    reason: str | None
    date: str | None
    time: str | None
    status: str | None
    admin_response: str | None
    processed_at: datetime
    guard_name: str | None
    emergency_contact: str | None
    profile_picture: str | None = None

    @classmethod
    def from_entry(
        cls, entry: DashboardEntry, profile_picture: str | None
    ) -> "DashboardEntryResponse":
        return cls(
            id=str(entry.id),
            request_id=entry.request_id,
            student_name=entry.student_name,
            student_id=entry.student_id,
            reason=entry.reason,
            date=entry.date,
            time=entry.time,
            status=entry.status,
            admin_response=entry.admin_response,
            processed_at=entry.processed_at,
            guard_name=entry.guard_name,
            emergency_contact=entry.emergency_contact,
            profile_picture=profile_picture,
        )


class BulkDeleteRequest(CamelModel):
    ids: list[str]


class DashboardDeleteResponse(CamelModel):
    message: str
    deleted_count: int
