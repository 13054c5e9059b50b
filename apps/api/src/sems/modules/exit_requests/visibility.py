"""
Department Visibility Filter

Computes which exit requests a viewer may see.

- Teachers: requests for their course/strand/grade that still need a decision
- Students: their own requests for their current course
- Admins: everything

Each filtered view is re-checked before it is returned; a record that slips
through raises IntegrityViolationError and nothing is returned.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sems.modules.accounts.models import Student, Teacher
from sems.modules.exit_requests.errors import IntegrityViolationError
from sems.modules.exit_requests.models import ExitRequest, RequestStatus
from sems.modules.exit_requests.routing import TeacherScope

logger = logging.getLogger(__name__)

# Statuses that still wait on a teacher decision
TEACHER_QUEUE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.ADMIN_APPROVED})


@dataclass(frozen=True)
class ExitRequestView:
    """
    An exit request as returned to a viewer.

    `record` holds the snapshot taken at submission; `profile_picture` is
    looked up live and is None when the student account no longer exists.
    """

    record: ExitRequest
    profile_picture: str | None = None


def normalize_course(value: str | None) -> str:
    return (value or "").strip().casefold()


def _newest_first(records: Iterable[ExitRequest]) -> list[ExitRequest]:
    return sorted(records, key=lambda r: r.submitted_at, reverse=True)


def check_teacher_postcondition(scope: TeacherScope, records: list[ExitRequest]) -> None:
    """
    Raises:
        IntegrityViolationError: If any record is outside the teacher's scope or queue
    """
    leaked = [
        r for r in records if not scope.admits(r) or r.status not in TEACHER_QUEUE_STATUSES
    ]
    if leaked:
        logger.critical(
            f"Teacher view for {scope.teacher_id} contained {len(leaked)} unauthorized "
            f"record(s): {[r.id for r in leaked]}"
        )
        raise IntegrityViolationError()


def check_student_postcondition(student_id: str, records: list[ExitRequest]) -> None:
    """
    Raises:
        IntegrityViolationError: If any record belongs to another student
    """
    leaked = [r for r in records if r.student_id.strip() != student_id]
    if leaked:
        logger.critical(
            f"Student view for {student_id} contained {len(leaked)} foreign "
            f"record(s): {[r.id for r in leaked]}"
        )
        raise IntegrityViolationError()


def for_teacher(teacher: Teacher, requests: Iterable[ExitRequest]) -> list[ExitRequest]:
    """
    Requests awaiting this teacher, newest first.

    Raises:
        UnrecognizedDepartmentError: If the teacher's department is not recognized
        IntegrityViolationError: If the filtered result fails the containment check
    """
    scope = TeacherScope.from_teacher(teacher)

    visible = []
    for request in requests:
        if request.status not in TEACHER_QUEUE_STATUSES:
            continue
        if not scope.admits(request):
            logger.warning(
                f"Blocked exit request {request.id} from teacher {teacher.teacher_id}: "
                f"outside {scope.department.value}/{scope.position}"
            )
            continue
        visible.append(request)

    result = _newest_first(visible)
    check_teacher_postcondition(scope, result)
    return result


def for_student(student: Student, requests: Iterable[ExitRequest]) -> list[ExitRequest]:
    """
    The student's own requests for their current course, newest first.

    Raises:
        IntegrityViolationError: If the filtered result fails the ownership check
    """
    student_id = student.student_id.strip()
    student_course = normalize_course(student.course)

    visible = []
    for request in requests:
        if request.student_id.strip() != student_id:
            logger.warning(
                f"Blocked exit request {request.id} from student {student_id}: different owner"
            )
            continue
        if normalize_course(request.course) != student_course:
            logger.warning(
                f"Blocked exit request {request.id} from student {student_id}: course mismatch"
            )
            continue
        visible.append(request)

    result = _newest_first(visible)
    check_student_postcondition(student_id, result)
    return result


def for_admin(requests: Iterable[ExitRequest]) -> list[ExitRequest]:
    """Every request, newest first."""
    return _newest_first(requests)


def enrich(
    records: Iterable[ExitRequest],
    profile_pictures: dict[str, str | None],
) -> list[ExitRequestView]:
    """Attach each student's current profile picture."""
    return [
        ExitRequestView(record=r, profile_picture=profile_pictures.get(r.student_id))
        for r in records
    ]
