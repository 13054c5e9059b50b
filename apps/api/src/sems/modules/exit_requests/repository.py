"""
Exit Requests Repository

Database operations for exit requests. Writes commit the request together
with the notification intents describing the change, so an event is never
recorded without its emails or vice versa.
"""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sems.modules.notifications.models import NotificationIntent

from .models import ExitRequest, RequestStatus


async def create(
    db: AsyncSession,
    exit_request: ExitRequest,
    intents: list[NotificationIntent],
) -> ExitRequest:
    """Insert a new exit request and its notification intents."""
    db.add(exit_request)
    db.add_all(intents)
    await db.commit()
    await db.refresh(exit_request)
    return exit_request


async def save(
    db: AsyncSession,
    exit_request: ExitRequest,
    intents: list[NotificationIntent],
) -> ExitRequest:
    """Persist changes to an exit request and append its notification intents."""
    db.add_all(intents)
    await db.commit()
    await db.refresh(exit_request)
    return exit_request


async def get_by_id(db: AsyncSession, request_id: str) -> ExitRequest | None:
    """Get an exit request by ID."""
    result = await db.execute(select(ExitRequest).where(ExitRequest.id == request_id))
    return result.scalar_one_or_none()


async def list_all(db: AsyncSession) -> list[ExitRequest]:
    """All exit requests, newest first."""
    result = await db.execute(select(ExitRequest).order_by(ExitRequest.submitted_at.desc()))
    return list(result.scalars().all())


async def list_for_course(
    db: AsyncSession,
    course: str,
    statuses: Iterable[RequestStatus],
) -> list[ExitRequest]:
    """Exit requests for a course in any of the given statuses, newest first."""
    result = await db.execute(
        select(ExitRequest)
        .where(
            ExitRequest.course == course,
            ExitRequest.status.in_(list(statuses)),
        )
        .order_by(ExitRequest.submitted_at.desc())
    )
    return list(result.scalars().all())


async def list_for_student(db: AsyncSession, student_id: str) -> list[ExitRequest]:
    """Exit requests submitted by a student, newest first."""
    result = await db.execute(
        select(ExitRequest)
        .where(ExitRequest.student_id == student_id)
        .order_by(ExitRequest.submitted_at.desc())
    )
    return list(result.scalars().all())


async def delete_all(db: AsyncSession) -> int:
    """Delete every exit request. Returns the number of deleted rows."""
    result = await db.execute(delete(ExitRequest))
    await db.commit()
    return result.rowcount or 0
