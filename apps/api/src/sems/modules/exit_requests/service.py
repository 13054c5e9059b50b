"""
Exit Requests Service Layer

Business logic for the dual-approval exit-request workflow.
Orchestrates the account directory, the approval state machine, the
visibility filter and the notification outbox.

This module implements:
1. Submission:
   - Resolve the student and snapshot their identity, course and year level
   - Queue emails for the department's teachers and every admin

2. Decisions:
   - Admin or teacher approves/declines; the state machine computes the status
   - Queue a confirmation for the deciding teacher
   - Queue a security alert once both parties approved

3. Views:
   - Admin: every request
   - Teacher: pending requests in their course/strand/grade
   - Student: their own requests
   Each view carries the student's live profile picture.

4. Clearing the request history

Notification intents are committed with the change they describe and are
delivered after the response (see notifications.dispatcher). Recipient
lookup failures are logged and never block the change itself.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from sems.modules.accounts.models import Teacher
from sems.modules.accounts.repository import AccountRepository
from sems.modules.exit_requests import repository, visibility
from sems.modules.exit_requests.errors import (
    ExitRequestNotFoundError,
    StudentNotFoundError,
    TeacherNotFoundError,
    UnrecognizedDepartmentError,
    ValidationError,
)
from sems.modules.exit_requests.models import ExitRequest, RequestStatus
from sems.modules.exit_requests.routing import TeacherScope
from sems.modules.exit_requests.schemas import DecisionRequest, ExitRequestCreate
from sems.modules.exit_requests.state_machine import Actor, ActorKind, apply_decision
from sems.modules.exit_requests.visibility import ExitRequestView
from sems.modules.notifications import dispatcher
from sems.modules.notifications.models import NotificationIntent

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    """A changed exit request plus the IDs of the emails queued for it."""

    view: ExitRequestView
    notification_ids: list[str] = field(default_factory=list)


def _intent_ids(intents: list[NotificationIntent]) -> list[str]:
    return [str(i.id) for i in intents]


# ============================================
# Submission
# ============================================


async def _submission_intents(db: AsyncSession, exit_request: ExitRequest) -> list[NotificationIntent]:
    """Build new-request emails. Returns [] if recipients cannot be resolved."""
    try:
        async with db.begin_nested():
            teachers = await dispatcher.resolve_teachers_for_request(db, exit_request)
            admins = await dispatcher.resolve_all_admins(db)
    except Exception as e:
        logger.error(
            f"Recipient lookup failed for exit request {exit_request.id}, "
            f"no notifications queued: {e}"
        )
        return []

    if not teachers:
        logger.warning(
            f"No teacher found for course '{exit_request.course}' on exit request {exit_request.id}"
        )

    return dispatcher.build_submission_intents(exit_request, teachers, admins)


async def submit_exit_request(db: AsyncSession, data: ExitRequestCreate) -> WorkflowResult:
    """
    Create an exit request for a student.

    Args:
        db: Database session
        data: Submitted request details

    Returns:
        The created request and the queued notification IDs

    Raises:
        StudentNotFoundError: If the student ID is unknown (400)
    """
    student = await AccountRepository.get_student(db, data.student_id)
    if student is None:
        logger.warning(f"Exit request submitted for unknown student {data.student_id}")
        raise StudentNotFoundError(data.student_id, status_code=400)

    profile_picture = student.profile_picture

    exit_request = ExitRequest(
        id=str(uuid.uuid4()),
        student_id=student.student_id.strip(),
        first_name=student.first_name,
        last_name=student.last_name,
        course=student.course,
        year_level=student.year_level,
        reason_for_exit=data.reason_for_exit,
        exit_date=data.date,
        exit_time=data.time,
        emergency_contact=data.emergency_contact,
        guard_name=data.guard_name,
        status=RequestStatus.PENDING,
        submitted_at=datetime.now(UTC),
        admin_approved=False,
        admin_response="",
        admin_responded_at=None,
        teacher_approved=False,
        teacher_id="",
        teacher_response="",
        teacher_responded_at=None,
    )

    intents = await _submission_intents(db, exit_request)
    exit_request = await repository.create(db, exit_request, intents)

    logger.info(
        f"Exit request {exit_request.id} submitted by student {exit_request.student_id} "
        f"({exit_request.course}), {len(intents)} notification(s) queued"
    )

    return WorkflowResult(
        view=ExitRequestView(record=exit_request, profile_picture=profile_picture),
        notification_ids=_intent_ids(intents),
    )


# ============================================
# Decisions
# ============================================


async def _lookup_deciding_teacher(
    db: AsyncSession,
    exit_request: ExitRequest,
    teacher_id: str,
) -> Teacher | None:
    """
    Load the deciding teacher for their confirmation email.

    Decisions by unknown or out-of-scope teachers are still recorded; they
    are only logged.
    """
    try:
        async with db.begin_nested():
            teacher = await AccountRepository.get_teacher(db, teacher_id)
    except Exception as e:
        logger.error(f"Teacher lookup failed for {teacher_id}: {e}")
        return None

    if teacher is None:
        logger.warning(
            f"Decision on exit request {exit_request.id} by unknown teacher {teacher_id}"
        )
        return None

    try:
        in_scope = TeacherScope.from_teacher(teacher).admits(exit_request)
    except UnrecognizedDepartmentError:
        in_scope = False

    if not in_scope:
        logger.warning(
            f"Teacher {teacher_id} decided on exit request {exit_request.id} "
            f"outside their department scope"
        )
    return teacher


async def record_decision(
    db: AsyncSession,
    request_id: str,
    data: DecisionRequest,
) -> WorkflowResult:
    """
    Record an admin or teacher decision on an exit request.

    A present teacher_id selects the teacher branch; otherwise the decision
    is the admin's.

    Args:
        db: Database session
        request_id: Exit request ID
        data: Decision and response text

    Returns:
        The updated request and the queued notification IDs

    Raises:
        ExitRequestNotFoundError: If the request doesn't exist
        RequestFinalizedError: If the request is fully approved or declined
    """
    try:
        uuid.UUID(request_id)
    except ValueError as e:
        raise ExitRequestNotFoundError(request_id) from e

    exit_request = await repository.get_by_id(db, request_id)
    if exit_request is None:
        raise ExitRequestNotFoundError(request_id)

    if data.teacher_id:
        actor = Actor.teacher(data.teacher_id)
        response = data.teacher_response
    else:
        actor = Actor.admin()
        response = data.admin_response

    previous_status = exit_request.status
    new_status = apply_decision(exit_request, actor, data.status, response, datetime.now(UTC))

    intents: list[NotificationIntent] = []

    if actor.kind == ActorKind.TEACHER:
        teacher = await _lookup_deciding_teacher(db, exit_request, actor.teacher_id)
        if teacher is not None:
            confirmation = dispatcher.build_teacher_confirmation_intent(
                exit_request, teacher, data.status.value, response
            )
            if confirmation is not None:
                intents.append(confirmation)

    if new_status == RequestStatus.FULLY_APPROVED:
        intents.append(dispatcher.build_security_alert_intent(exit_request))

    exit_request = await repository.save(db, exit_request, intents)

    logger.info(
        f"Exit request {exit_request.id}: {actor.label} {data.status.value}, "
        f"{previous_status.value} -> {new_status.value}"
    )

    pictures = await AccountRepository.get_profile_pictures(db, [exit_request.student_id])
    return WorkflowResult(
        view=ExitRequestView(
            record=exit_request,
            profile_picture=pictures.get(exit_request.student_id),
        ),
        notification_ids=_intent_ids(intents),
    )


# ============================================
# Views
# ============================================


async def list_for_admin(db: AsyncSession) -> list[ExitRequestView]:
    """Every exit request, newest first."""
    records = visibility.for_admin(await repository.list_all(db))
    pictures = await AccountRepository.get_profile_pictures(db, [r.student_id for r in records])
    return visibility.enrich(records, pictures)


async def list_for_teacher(db: AsyncSession, teacher_id: str) -> list[ExitRequestView]:
    """
    Requests waiting on a teacher's decision.

    Raises:
        ValidationError: If the teacher ID is blank
        TeacherNotFoundError: If the teacher doesn't exist
        UnrecognizedDepartmentError: If the teacher's department is not College or Highschool
        IntegrityViolationError: If the filtered view fails its containment check
    """
    teacher_id = teacher_id.strip()
    if not teacher_id:
        raise ValidationError("Teacher ID is required")

    teacher = await AccountRepository.get_teacher(db, teacher_id)
    if teacher is None:
        raise TeacherNotFoundError(teacher_id)

    # Reject unknown departments before touching exit requests
    TeacherScope.from_teacher(teacher)

    candidates = await repository.list_for_course(
        db, teacher.position, visibility.TEACHER_QUEUE_STATUSES
    )
    records = visibility.for_teacher(teacher, candidates)

    logger.info(f"Teacher {teacher_id} queue: {len(records)} request(s)")

    pictures = await AccountRepository.get_profile_pictures(db, [r.student_id for r in records])
    return visibility.enrich(records, pictures)


async def list_for_student(db: AsyncSession, student_id: str) -> list[ExitRequestView]:
    """
    A student's own requests.

    Raises:
        ValidationError: If the student ID is blank
        StudentNotFoundError: If the student doesn't exist
        IntegrityViolationError: If the filtered view fails its ownership check
    """
    student_id = student_id.strip()
    if not student_id:
        raise ValidationError("Student ID is required")

    student = await AccountRepository.get_student(db, student_id)
    if student is None:
        raise StudentNotFoundError(student_id)

    candidates = await repository.list_for_student(db, student_id)
    records = visibility.for_student(student, candidates)

    return [ExitRequestView(record=r, profile_picture=student.profile_picture) for r in records]


# ============================================
# History
# ============================================


async def clear_history(db: AsyncSession) -> int:
    """Delete every exit request. Returns the number deleted."""
    deleted_count = await repository.delete_all(db)
    logger.warning(f"Exit request history cleared: {deleted_count} request(s) deleted")
    return deleted_count


__all__ = [
    "WorkflowResult",
    "clear_history",
    "list_for_admin",
    "list_for_student",
    "list_for_teacher",
    "record_decision",
    "submit_exit_request",
]
