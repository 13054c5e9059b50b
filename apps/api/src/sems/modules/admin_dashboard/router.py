"""
Admin Dashboard Router

API endpoints for the log of processed exit requests.

Endpoints:
- POST /admin-dashboard - Record a processed request
- GET /admin-dashboard - The log, most recently processed first
- DELETE /admin-dashboard/bulk-delete - Delete selected entries
- DELETE /admin-dashboard - Clear the log
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from sems.core.config import settings
from sems.core.database import get_db
from sems.core.rate_limit import enforce_rate_limit
from sems.modules.admin_dashboard import service
from sems.modules.admin_dashboard.schemas import (
    BulkDeleteRequest,
    DashboardDeleteResponse,
    DashboardEntryCreate,
    DashboardEntryResponse,
)
from sems.modules.exit_requests.errors import ExitRequestServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: ExitRequestServiceError) -> None:
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
    response_model=DashboardEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record Processed Request",
    description="Add a processed exit request to the admin dashboard log.",
)
async def add_dashboard_entry(
    data: DashboardEntryCreate,
    db: AsyncSession = Depends(get_db),
) -> DashboardEntryResponse:
    try:
        view = await service.add_entry(db, data)
    except Exception as e:
        _internal_error(e, "recording dashboard entry")

    return DashboardEntryResponse.from_entry(view.entry, view.profile_picture)


@router.get(
    "",
    response_model=list[DashboardEntryResponse],
    summary="List Processed Requests",
    description="The admin dashboard log, most recently processed first.",
)
async def list_dashboard_entries(
    db: AsyncSession = Depends(get_db),
) -> list[DashboardEntryResponse]:
    try:
        views = await service.list_entries(db)
    except Exception as e:
        _internal_error(e, "listing dashboard entries")

    return [DashboardEntryResponse.from_entry(v.entry, v.profile_picture) for v in views]


@router.delete(
    "/bulk-delete",
    response_model=DashboardDeleteResponse,
    summary="Delete Selected Entries",
    description="Delete the dashboard entries with the given IDs.",
    responses={
        400: {"description": "Empty or missing IDs"},
        404: {"description": "None of the IDs exist"},
    },
)
async def bulk_delete_dashboard_entries(
    data: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db),
) -> DashboardDeleteResponse:
    await enforce_rate_limit("admin_dashboard:bulk_delete", *settings.rate_limit_dashboard_delete)

    try:
        deleted_count = await service.bulk_delete(db, data.ids)
    except ExitRequestServiceError as e:
        logger.warning(f"Dashboard bulk delete rejected: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        _internal_error(e, "deleting dashboard entries")

    return DashboardDeleteResponse(
        message=f"Successfully deleted {deleted_count} records.",
        deleted_count=deleted_count,
    )


@router.delete(
    "",
    response_model=DashboardDeleteResponse,
    summary="Clear Dashboard Log",
    description="Delete every dashboard entry. Exit requests are not affected.",
)
async def clear_dashboard_log(
    db: AsyncSession = Depends(get_db),
) -> DashboardDeleteResponse:
    await enforce_rate_limit("admin_dashboard:clear", *settings.rate_limit_dashboard_delete)

    try:
        deleted_count = await service.clear_log(db)
    except Exception as e:
        _internal_error(e, "clearing dashboard log")

    return DashboardDeleteResponse(
        message=f"Cleared {deleted_count} history logs.",
        deleted_count=deleted_count,
    )
