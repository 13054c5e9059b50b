from fastapi import APIRouter

from sems.modules.admin_dashboard.router import router as admin_dashboard_router
from sems.modules.exit_requests.router import router as exit_requests_router

api_router = APIRouter()

api_router.include_router(exit_requests_router, prefix="/exit-requests", tags=["Exit Requests"])
api_router.include_router(admin_dashboard_router, prefix="/admin-dashboard", tags=["Admin Dashboard"])
