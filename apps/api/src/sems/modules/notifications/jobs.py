"""
Notification Background Jobs

Retries outbox rows that were not delivered right after the HTTP response:
1. Rows whose previous attempt failed and whose backoff has elapsed
2. Rows never attempted and older than the stale threshold

The job is idempotent: sent and failed rows are never selected again, and
row locks with SKIP LOCKED keep concurrent runs from sending twice.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from sems.core.config import settings
from sems.core.database import async_session_maker
from sems.core.scheduler import register_job
from sems.modules.notifications import repository
from sems.modules.notifications.dispatcher import attempt_delivery

logger = logging.getLogger(__name__)

JOB_ID_DISPATCH_PENDING = "notifications_dispatch_pending"


async def dispatch_pending_notifications() -> dict[str, Any]:
    """
    Deliver one batch of due outbox rows.

    Returns:
        Dict with job execution summary
    """
    executed_at = datetime.now(UTC)
    stale_before = executed_at - timedelta(seconds=settings.notification_stale_after_seconds)

    results = {
        "executed_at": executed_at.isoformat(),
        "total_due": 0,
        "total_sent": 0,
        "total_failed": 0,
    }

    async with async_session_maker() as db:
        intents = await repository.get_due(
            db,
            now=executed_at,
            stale_before=stale_before,
            limit=settings.notification_batch_size,
        )
        results["total_due"] = len(intents)

        for intent in intents:
            if await attempt_delivery(intent, executed_at):
                results["total_sent"] += 1
            else:
                results["total_failed"] += 1

        await db.commit()

    if results["total_due"]:
        logger.info(
            f"Notification retry job completed. Due: {results['total_due']}, "
            f"Sent: {results['total_sent']}, Failed: {results['total_failed']}"
        )

    return results


def register_notification_jobs() -> None:
    """Register notification background jobs with the scheduler."""
    interval = settings.notification_retry_interval_seconds

    register_job(
        job_id=JOB_ID_DISPATCH_PENDING,
        func=dispatch_pending_notifications,
        trigger=IntervalTrigger(seconds=interval),
    )
    logger.info(f"Registered job: {JOB_ID_DISPATCH_PENDING} (interval: {interval}s)")
