"""
Admin Dashboard Service Layer

Keeps the log of exit requests administrators have processed.

1. Recording a processed request (posted by the admin client)
2. Listing the log, most recently processed first, with each student's
   live profile picture
3. Deleting selected entries
4. Clearing the whole log

The log is separate from the exit requests themselves; neither side's
deletes touch the other.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from sems.modules.accounts.repository import AccountRepository
from sems.modules.admin_dashboard import repository
from sems.modules.admin_dashboard.errors import EmptySelectionError, NoMatchingEntriesError
from sems.modules.admin_dashboard.models import DashboardEntry
from sems.modules.admin_dashboard.schemas import DashboardEntryCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardEntryView:
    entry: DashboardEntry
    profile_picture: str | None = None


async def _pictures_for(db: AsyncSession, entries: list[DashboardEntry]) -> dict[str, str | None]:
    """Profile pictures by student ID. A failed lookup leaves every picture empty."""
    student_ids = [e.student_id for e in entries if e.student_id]
    try:
        return await AccountRepository.get_profile_pictures(db, student_ids)
    except Exception as e:
        logger.error(f"Profile picture lookup failed for dashboard entries: {e}")
        return {}


async def add_entry(db: AsyncSession, data: DashboardEntryCreate) -> DashboardEntryView:
    """
    Record a processed exit request.

    processed_at defaults to now when the client omits it.
    """
    student_id = data.student_id.strip() if data.student_id else data.student_id

    entry = DashboardEntry(
        id=str(uuid.uuid4()),
        request_id=data.request_id,
        student_name=data.student_name,
        student_id=student_id,
        reason=data.reason,
        date=data.date,
        time=data.time,
        status=data.status,
        admin_response=data.admin_response,
        processed_at=data.processed_at or datetime.now(UTC),
        guard_name=data.guard_name,
        emergency_contact=data.emergency_contact,
    )
    entry = await repository.create(db, entry)

    logger.info(
        f"Dashboard entry {entry.id} recorded for exit request {entry.request_id} ({entry.status})"
    )

    pictures = await _pictures_for(db, [entry])
    return DashboardEntryView(entry=entry, profile_picture=pictures.get(entry.student_id))


async def list_entries(db: AsyncSession) -> list[DashboardEntryView]:
    """Every entry, most recently processed first."""
    entries = await repository.list_all(db)
    pictures = await _pictures_for(db, entries)
    return [DashboardEntryView(entry=e, profile_picture=pictures.get(e.student_id)) for e in entries]


async def bulk_delete(db: AsyncSession, entry_ids: list[str]) -> int:
    """
    Delete the selected entries.

    IDs that are not UUIDs cannot match and are ignored.

    Returns:
        Number of deleted entries

    Raises:
        EmptySelectionError: If no IDs were given
        NoMatchingEntriesError: If none of the IDs exist
    """
    if not entry_ids:
        raise EmptySelectionError()

    valid_ids = []
    for entry_id in entry_ids:
        try:
            valid_ids.append(str(uuid.UUID(entry_id.strip())))
        except ValueError:
            logger.warning(f"Ignoring malformed dashboard entry ID in bulk delete: {entry_id!r}")

    deleted_count = await repository.delete_by_ids(db, valid_ids) if valid_ids else 0
    if deleted_count == 0:
        raise NoMatchingEntriesError()

    logger.info(f"Deleted {deleted_count} of {len(entry_ids)} selected dashboard entries")
    return deleted_count


async def clear_log(db: AsyncSession) -> int:
    """Delete every dashboard entry. Returns the number deleted."""
    deleted_count = await repository.delete_all(db)
    logger.warning(f"Admin dashboard log cleared: {deleted_count} entries deleted")
    return deleted_count


__all__ = [
    "DashboardEntryView",
    "add_entry",
    "bulk_delete",
    "clear_log",
    "list_entries",
]
