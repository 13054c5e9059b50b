"""
Approval State Machine

An exit request needs both the department teacher and an admin to approve.
Each decision overwrites only the deciding party's approval and the status
is recomputed:

    pending --admin approves--> admin_approved
    pending --teacher approves--> teacher_approved
    pending --either declines--> declined
    admin_approved --teacher approves--> fully_approved
    admin_approved --teacher declines--> declined
    teacher_approved --admin approves--> fully_approved
    teacher_approved --admin declines--> declined

A party repeating its decision on a non-terminal request follows the same
rule. fully_approved and declined are terminal.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sems.modules.exit_requests.errors import InvalidStatusTransitionError, RequestFinalizedError
from sems.modules.exit_requests.models import ExitRequest, RequestStatus


class ActorKind(str, Enum):
    """Who is deciding."""

    ADMIN = "admin"
    TEACHER = "teacher"


class Decision(str, Enum):
    """An approval decision."""

    APPROVED = "approved"
    DECLINED = "declined"


@dataclass(frozen=True)
class Actor:
    kind: ActorKind
    teacher_id: str | None = None

    @classmethod
    def admin(cls) -> "Actor":
        return cls(kind=ActorKind.ADMIN)

    @classmethod
    def teacher(cls, teacher_id: str) -> "Actor":
        return cls(kind=ActorKind.TEACHER, teacher_id=teacher_id)

    @property
    def label(self) -> str:
        if self.kind == ActorKind.TEACHER:
            return f"teacher:{self.teacher_id}"
        return "admin"


TERMINAL_STATUSES = frozenset({RequestStatus.FULLY_APPROVED, RequestStatus.DECLINED})

VALID_STATUS_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset(
        {RequestStatus.ADMIN_APPROVED, RequestStatus.TEACHER_APPROVED, RequestStatus.DECLINED}
    ),
    RequestStatus.ADMIN_APPROVED: frozenset(
        {RequestStatus.ADMIN_APPROVED, RequestStatus.FULLY_APPROVED, RequestStatus.DECLINED}
    ),
    RequestStatus.TEACHER_APPROVED: frozenset(
        {RequestStatus.TEACHER_APPROVED, RequestStatus.FULLY_APPROVED, RequestStatus.DECLINED}
    ),
    RequestStatus.FULLY_APPROVED: frozenset(),
    RequestStatus.DECLINED: frozenset(),
}


def compute_status(
    actor_kind: ActorKind,
    decision: Decision,
    other_party_approved: bool,
) -> RequestStatus:
    """
    Status after a decision. Decline always wins.

    Args:
        actor_kind: The deciding party
        decision: Approved or declined
        other_party_approved: Whether the other party's approval is already recorded

    Returns:
        The resulting status
    """
    if decision == Decision.DECLINED:
        return RequestStatus.DECLINED
    if other_party_approved:
        return RequestStatus.FULLY_APPROVED
    if actor_kind == ActorKind.ADMIN:
        return RequestStatus.ADMIN_APPROVED
    return RequestStatus.TEACHER_APPROVED


def validate_status_transition(request_id: str, current: RequestStatus, new: RequestStatus) -> None:
    """
    Raises:
        RequestFinalizedError: If the request is already terminal
        InvalidStatusTransitionError: If the change is not in the transition table
    """
    if current in TERMINAL_STATUSES:
        raise RequestFinalizedError(request_id, current.value)
    if new not in VALID_STATUS_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, new.value)


def apply_decision(
    exit_request: ExitRequest,
    actor: Actor,
    decision: Decision,
    response: str,
    now: datetime,
) -> RequestStatus:
    """
    Record a decision on the request in place and return the new status.

    Nothing is modified when the decision is rejected.

    Raises:
        RequestFinalizedError: If the request is fully approved or declined
        InvalidStatusTransitionError: If the stored approvals are inconsistent with the status
    """
    approved = decision == Decision.APPROVED

    if actor.kind == ActorKind.ADMIN:
        other_party_approved = exit_request.teacher_approved
    else:
        other_party_approved = exit_request.admin_approved

    new_status = compute_status(actor.kind, decision, other_party_approved)
    validate_status_transition(exit_request.id, exit_request.status, new_status)

    if actor.kind == ActorKind.ADMIN:
        exit_request.admin_approved = approved
        exit_request.admin_response = response
        exit_request.admin_responded_at = now
    else:
        exit_request.teacher_approved = approved
        exit_request.teacher_id = actor.teacher_id or ""
        exit_request.teacher_response = response
        exit_request.teacher_responded_at = now

    exit_request.status = new_status
    return new_status
