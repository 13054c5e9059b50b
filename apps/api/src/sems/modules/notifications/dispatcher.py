"""
Notification Dispatcher

Turns exit-request events into outbox rows and delivers them.

Flow:
1. The service resolves recipients and builds intents for an event
2. Intents are committed together with the exit-request change
3. After the HTTP response, dispatch_intents() delivers them
4. Failed deliveries are retried by the periodic job with exponential
   backoff until notification_max_attempts, then marked failed

Delivery never raises to callers: failures are logged and recorded on the
outbox row.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from sems.core.config import settings
from sems.core.database import async_session_maker
from sems.core.email import (
    send_admin_new_request,
    send_security_alert,
    send_teacher_decision_confirmation,
    send_teacher_new_request,
)
from sems.modules.accounts.models import Admin, Teacher
from sems.modules.accounts.repository import AccountRepository
from sems.modules.exit_requests.errors import UnrecognizedDepartmentError
from sems.modules.exit_requests.models import ExitRequest
from sems.modules.exit_requests.routing import TeacherScope, parse_routing_key
from sems.modules.notifications import repository
from sems.modules.notifications.models import IntentStatus, NotificationIntent, NotificationKind

logger = logging.getLogger(__name__)

TEMPLATE_SENDERS: dict[NotificationKind, Callable[..., Awaitable[bool]]] = {
    NotificationKind.TEACHER_NEW_REQUEST: send_teacher_new_request,
    NotificationKind.ADMIN_NEW_REQUEST: send_admin_new_request,
    NotificationKind.TEACHER_DECISION_CONFIRMATION: send_teacher_decision_confirmation,
    NotificationKind.SECURITY_ALERT: send_security_alert,
}


class NotificationFailure(Exception):
    """A single delivery attempt failed."""


# ============================================
# Delivery
# ============================================


async def _deliver(
    recipient_email: str,
    template_kind: NotificationKind | str,
    template_args: dict[str, Any],
) -> None:
    """
    Send one email, bounded by the configured timeout.

    Raises:
        NotificationFailure: On unknown template, sender failure or timeout
    """
    try:
        kind = NotificationKind(template_kind)
    except ValueError as e:
        raise NotificationFailure(f"Unknown template kind: {template_kind}") from e

    sender = TEMPLATE_SENDERS[kind]
    timeout = settings.notification_timeout_seconds

    try:
        sent = await asyncio.wait_for(
            sender(to_email=recipient_email, **template_args),
            timeout=timeout,
        )
    except TimeoutError as e:
        raise NotificationFailure(f"Timed out after {timeout}s") from e
    except Exception as e:
        raise NotificationFailure(f"{type(e).__name__}: {e}") from e

    if not sent:
        raise NotificationFailure("Email provider rejected the message")


async def notify(
    recipient_email: str,
    template_kind: NotificationKind | str,
    template_args: dict[str, Any],
) -> bool:
    """
    Send one email. Never raises.

    Returns:
        True if the email was handed to the provider
    """
    try:
        await _deliver(recipient_email, template_kind, template_args)
        return True
    except NotificationFailure as e:
        logger.error(f"Failed to send {template_kind} notification: {e}")
        return False


def retry_delay(attempts: int) -> timedelta:
    """Backoff before the next attempt: base * 2^(attempts - 1)."""
    base = settings.notification_retry_base_seconds
    return timedelta(seconds=base * 2 ** max(attempts - 1, 0))


async def attempt_delivery(intent: NotificationIntent, now: datetime) -> bool:
    """
    Try to deliver one outbox row and record the outcome on it.

    The caller commits.

    Returns:
        True if sent
    """
    intent.attempts += 1

    try:
        await _deliver(intent.recipient_email, intent.template_kind, intent.template_args)
    except NotificationFailure as e:
        intent.last_error = str(e)[:1000]

        if intent.attempts >= settings.notification_max_attempts:
            intent.status = IntentStatus.FAILED
            intent.next_attempt_at = None
            logger.error(
                f"Notification {intent.id} ({intent.template_kind.value}) failed permanently "
                f"after {intent.attempts} attempt(s): {e}"
            )
        else:
            intent.next_attempt_at = now + retry_delay(intent.attempts)
            logger.warning(
                f"Notification {intent.id} ({intent.template_kind.value}) attempt "
                f"{intent.attempts} failed, retrying at {intent.next_attempt_at.isoformat()}: {e}"
            )
        return False

    intent.status = IntentStatus.SENT
    intent.sent_at = now
    intent.next_attempt_at = None
    intent.last_error = None
    logger.info(f"Notification {intent.id} ({intent.template_kind.value}) sent")
    return True


async def dispatch_intents(intent_ids: list[str]) -> dict[str, int]:
    """
    Deliver freshly committed intents. Runs after the HTTP response.

    Opens its own database session; rows already handled elsewhere are skipped.

    Returns:
        Counts of sent and failed deliveries
    """
    summary = {"sent": 0, "failed": 0}
    if not intent_ids:
        return summary

    try:
        async with async_session_maker() as db:
            intents = await repository.get_pending_by_ids(db, intent_ids)
            now = datetime.now(UTC)

            for intent in intents:
                if await attempt_delivery(intent, now):
                    summary["sent"] += 1
                else:
                    summary["failed"] += 1

            await db.commit()
    except Exception as e:
        # Rows stay pending and are picked up by the retry job
        logger.error(f"Notification dispatch failed for {len(intent_ids)} intent(s): {e}")

    return summary


# ============================================
# Recipient resolution
# ============================================


async def resolve_teachers_for_request(db: AsyncSession, exit_request: ExitRequest) -> list[Teacher]:
    """
    Teachers responsible for the request's course.

    Unrecognized course codes have no teachers.
    """
    key = parse_routing_key(exit_request.course)
    if key is None:
        logger.info(
            f"No routing for course '{exit_request.course}' on exit request {exit_request.id}"
        )
        return []

    candidates = await AccountRepository.find_teachers(
        db, key.department.value, exit_request.course
    )

    teachers = []
    for teacher in candidates:
        try:
            scope = TeacherScope.from_teacher(teacher)
        except UnrecognizedDepartmentError:
            continue
        if scope.admits(exit_request):
            teachers.append(teacher)
    return teachers


async def resolve_all_admins(db: AsyncSession) -> list[Admin]:
    return await AccountRepository.list_admins(db)


# ============================================
# Intent builders
# ============================================


def _request_args(exit_request: ExitRequest) -> dict[str, str]:
    return {
        "student_name": exit_request.student_name,
        "student_id": exit_request.student_id,
        "course": exit_request.course,
        "year_level": exit_request.year_level,
        "reason": exit_request.reason_for_exit,
        "date": exit_request.exit_date,
        "time": exit_request.exit_time,
    }


def _intent(
    exit_request: ExitRequest,
    recipient_email: str,
    kind: NotificationKind,
    args: dict[str, str],
) -> NotificationIntent:
    return NotificationIntent(
        exit_request_id=exit_request.id,
        recipient_email=recipient_email,
        template_kind=kind,
        template_args=args,
        status=IntentStatus.PENDING,
        attempts=0,
    )


def build_submission_intents(
    exit_request: ExitRequest,
    teachers: list[Teacher],
    admins: list[Admin],
) -> list[NotificationIntent]:
    """One email per matching teacher and one per admin. Recipients without an email are skipped."""
    intents = []

    for teacher in teachers:
        if not teacher.email:
            logger.warning(f"Teacher {teacher.teacher_id} has no email, skipping notification")
            continue
        args = {"teacher_name": teacher.full_name, **_request_args(exit_request)}
        intents.append(
            _intent(exit_request, teacher.email, NotificationKind.TEACHER_NEW_REQUEST, args)
        )

    for admin in admins:
        if not admin.email:
            logger.warning(f"Admin {admin.admin_id} has no email, skipping notification")
            continue
        args = {"admin_name": admin.full_name, **_request_args(exit_request)}
        intents.append(_intent(exit_request, admin.email, NotificationKind.ADMIN_NEW_REQUEST, args))

    return intents


def build_teacher_confirmation_intent(
    exit_request: ExitRequest,
    teacher: Teacher,
    decision: str,
    response: str,
) -> NotificationIntent | None:
    if not teacher.email:
        logger.warning(f"Teacher {teacher.teacher_id} has no email, skipping confirmation")
        return None

    args = {
        "teacher_name": teacher.full_name,
        "student_name": exit_request.student_name,
        "student_id": exit_request.student_id,
        "decision": decision,
        "response": response,
    }
    return _intent(exit_request, teacher.email, NotificationKind.TEACHER_DECISION_CONFIRMATION, args)


def build_security_alert_intent(exit_request: ExitRequest) -> NotificationIntent:
    args = {
        "student_name": exit_request.student_name,
        "student_id": exit_request.student_id,
        "course": exit_request.course,
        "date": exit_request.exit_date,
        "time": exit_request.exit_time,
        "reason": exit_request.reason_for_exit,
    }
    return _intent(exit_request, settings.security_email, NotificationKind.SECURITY_ALERT, args)
