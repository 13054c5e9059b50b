"""
Notification Outbox Repository

Database operations for queued notification emails.
"""

from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import IntentStatus, NotificationIntent


async def get_pending_by_ids(db: AsyncSession, intent_ids: list[str]) -> list[NotificationIntent]:
    """Get the still-pending intents among the given IDs."""
    if not intent_ids:
        return []

    result = await db.execute(
        select(NotificationIntent)
        .where(
            and_(
                NotificationIntent.id.in_(intent_ids),
                NotificationIntent.status == IntentStatus.PENDING,
            )
        )
        .order_by(NotificationIntent.created_at)
        .with_for_update(skip_locked=True)
    )
    return list(result.scalars().all())


async def get_due(
    db: AsyncSession,
    now: datetime,
    stale_before: datetime,
    limit: int,
) -> list[NotificationIntent]:
    """
    Get pending intents ready for a delivery attempt.

    Due intents are either retries whose backoff has elapsed, or intents
    that were never attempted and were created before `stale_before` (the
    post-response dispatch did not run).
    """
    result = await db.execute(
        select(NotificationIntent)
        .where(
            and_(
                NotificationIntent.status == IntentStatus.PENDING,
                or_(
                    and_(
                        NotificationIntent.attempts >= 1,
                        NotificationIntent.next_attempt_at <= now,
                    ),
                    and_(
                        NotificationIntent.attempts == 0,
                        NotificationIntent.created_at <= stale_before,
                    ),
                ),
            )
        )
        .order_by(NotificationIntent.created_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )
    return list(result.scalars().all())
