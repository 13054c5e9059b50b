"""
SEMS API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Database and Redis connections
- Background job scheduler (notification retries)
- CORS middleware
- API routing and error responses
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sems.api import api_router
from sems.core.config import settings
from sems.core.database import close_db, init_db
from sems.core.redis import close_redis, init_redis
from sems.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from sems.modules.notifications.jobs import register_notification_jobs

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Redis connection
    - Database connection
    - Background job scheduler
    """
    logger.info(f"Starting {settings.app_name} in {settings.python_env} mode...")

    # Redis is optional: rate limiting falls back to memory
    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    try:
        register_notification_jobs()
        await start_scheduler()
    except Exception as e:
        logger.error(f"Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield

    logger.info(f"Shutting down {settings.app_name}...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()
    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title=settings.app_name,
    description="Smart Exit Monitoring System API",
    version=settings.app_version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")
# Unversioned paths for existing clients (/exit-requests, /admin-dashboard)
app.include_router(api_router, include_in_schema=False)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Error Responses
# ============================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are 400s."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "error": "VALIDATION_ERROR",
                "message": f"{field}: {message}" if field else message,
            }
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
            }
        },
    )


# ============================================
# Health
# ============================================


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}


@app.get("/api/info", tags=["Root"])
async def api_info() -> dict:
    """Service metadata and endpoint summary."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.python_env,
        "endpoints": {
            "submit": "POST /api/v1/exit-requests",
            "list_all": "GET /api/v1/exit-requests",
            "student_view": "GET /api/v1/exit-requests/student/{studentID}",
            "teacher_view": "GET /api/v1/exit-requests/teacher/{teacherID}",
            "decision": "PUT /api/v1/exit-requests/{id}",
            "clear_history": "DELETE /api/v1/exit-requests/clear-history",
            "dashboard": "GET|POST|DELETE /api/v1/admin-dashboard",
            "dashboard_bulk_delete": "DELETE /api/v1/admin-dashboard/bulk-delete",
        },
    }


# ============================================
# Background Job Debug Endpoints
# ============================================
# Manual control of background jobs, development only.

debug_router = APIRouter(prefix="/debug/jobs", tags=["Debug"])


@debug_router.get("")
async def list_jobs():
    """List registered background jobs with next run time and pause state."""
    return {"jobs": list_registered_jobs()}


@debug_router.post("/{job_id}/trigger")
async def trigger_job(job_id: str):
    """
    Run a background job immediately, bypassing the schedule.

    Available jobs:
        - notifications_dispatch_pending
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@debug_router.post("/{job_id}/pause")
async def pause_job_endpoint(job_id: str):
    return {"job_id": job_id, "paused": pause_job(job_id)}


@debug_router.post("/{job_id}/resume")
async def resume_job_endpoint(job_id: str):
    return {"job_id": job_id, "resumed": resume_job(job_id)}


if settings.is_development:
    app.include_router(debug_router)
