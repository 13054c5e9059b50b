"""
Exit Requests Router

API endpoints for the exit-request workflow.

Endpoints:
- POST /exit-requests - Submit a new exit request
- GET /exit-requests - Admin view of every request
- GET /exit-requests/student/{student_id} - A student's own requests
- GET /exit-requests/teacher/{teacher_id} - A teacher's approval queue
- PUT /exit-requests/{request_id} - Record an admin or teacher decision
- DELETE /exit-requests/clear-history - Delete every request

Emails are queued with each change and delivered after the response.
Write endpoints are rate limited via Redis.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sems.core.config import settings
from sems.core.database import get_db
from sems.core.rate_limit import enforce_rate_limit
from sems.modules.exit_requests import service
from sems.modules.exit_requests.errors import ExitRequestServiceError, IntegrityViolationError
from sems.modules.exit_requests.schemas import (
    ClearHistoryResponse,
    DecisionRequest,
    ExitRequestCreate,
    ExitRequestResponse,
)
from sems.modules.notifications.dispatcher import dispatch_intents

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: ExitRequestServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def _internal_error(e: Exception, action: str) -> None:
    logger.exception(f"Error {action}: {e}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    ) from e


@router.post(
    "",
    response_model=ExitRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Exit Request",
    description="""
Submit a request to leave campus.

The student's name, course and year level are copied from their account.
The department's teachers and every admin are emailed.

**Approval:** both a teacher and an admin must approve before the request
is fully approved.
""",
    responses={
        400: {"description": "Unknown student or invalid body"},
        429: {"description": "Too many submissions"},
    },
)
async def submit_exit_request(
    data: ExitRequestCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
) -> ExitRequestResponse:
    await enforce_rate_limit(f"exit_requests:submit:{data.student_id}", *settings.rate_limit_submit)

    try:
        result = await service.submit_exit_request(db, data)
    except ExitRequestServiceError as e:
        logger.warning(f"Exit request submission rejected: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "submitting exit request")

    background_tasks.add_task(dispatch_intents, result.notification_ids)
    return ExitRequestResponse.from_view(result.view)


@router.get(
    "",
    response_model=list[ExitRequestResponse],
    summary="List All Exit Requests",
    description="Admin view: every exit request, newest first.",
)
async def list_exit_requests(
    db: AsyncSession = Depends(get_db),
) -> list[ExitRequestResponse]:
    try:
        views = await service.list_for_admin(db)
    except ExitRequestServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "listing exit requests")

    return [ExitRequestResponse.from_view(v) for v in views]


@router.get(
    "/student/{student_id}",
    response_model=list[ExitRequestResponse],
    summary="List Student's Exit Requests",
    description="A student's own exit requests for their current course, newest first.",
    responses={
        400: {"description": "Blank student ID"},
        404: {"description": "Student not found"},
    },
)
async def list_student_exit_requests(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[ExitRequestResponse]:
    try:
        views = await service.list_for_student(db, student_id)
    except IntegrityViolationError as e:
        _handle_service_error(e)
    except ExitRequestServiceError as e:
        logger.warning(f"Student view rejected for {student_id}: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "listing student exit requests")

    return [ExitRequestResponse.from_view(v) for v in views]


@router.get(
    "/teacher/{teacher_id}",
    response_model=list[ExitRequestResponse],
    summary="List Teacher's Approval Queue",
    description="""
Pending and admin-approved requests for the teacher's course, strand or grade.

Highschool teachers only see Highschool students.
""",
    responses={
        400: {"description": "Unrecognized teacher department"},
        404: {"description": "Teacher not found"},
    },
)
async def list_teacher_exit_requests(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[ExitRequestResponse]:
    try:
        views = await service.list_for_teacher(db, teacher_id)
    except IntegrityViolationError as e:
        _handle_service_error(e)
    except ExitRequestServiceError as e:
        logger.warning(f"Teacher view rejected for {teacher_id}: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "listing teacher exit requests")

    return [ExitRequestResponse.from_view(v) for v in views]


@router.delete(
    "/clear-history",
    response_model=ClearHistoryResponse,
    summary="Clear Exit Request History",
    description="Delete every exit request. Queued emails are kept.",
)
async def clear_history(
    db: AsyncSession = Depends(get_db),
) -> ClearHistoryResponse:
    await enforce_rate_limit("exit_requests:clear_history", *settings.rate_limit_clear_history)

    try:
        deleted_count = await service.clear_history(db)
    except Exception as e:
        _internal_error(e, "clearing exit request history")

    return ClearHistoryResponse(
        message="Exit request history cleared successfully",
        deleted_count=deleted_count,
    )


@router.put(
    "/{request_id}",
    response_model=ExitRequestResponse,
    summary="Record Decision",
    description="""
Approve or decline an exit request.

A `teacherID` in the body records the teacher's decision; without it the
decision is the admin's. A decline is final. Once both parties approve,
campus security is emailed.
""",
    responses={
        404: {"description": "Exit request not found"},
        409: {"description": "Exit request already fully approved or declined"},
    },
)
async def record_decision(
    request_id: str,
    data: DecisionRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
) -> ExitRequestResponse:
    # Admin callers carry no identity, so admin decisions are limited per request
    actor_key = f"teacher:{data.teacher_id}" if data.teacher_id else f"admin:{request_id}"
    await enforce_rate_limit(f"exit_requests:decision:{actor_key}", *settings.rate_limit_decision)

    try:
        result = await service.record_decision(db, request_id, data)
    except ExitRequestServiceError as e:
        logger.warning(f"Decision on exit request {request_id} rejected: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "recording decision")

    background_tasks.add_task(dispatch_intents, result.notification_ids)
    return ExitRequestResponse.from_view(result.view)
