"""Top-level API router."""

from fastapi import APIRouter

from attendance_reports.api.routes.exports import router as exports_router
from attendance_reports.api.routes.health import router as health_router
from attendance_reports.api.routes.me import router as me_router
from attendance_reports.api.routes.reports import router as reports_router
from attendance_reports.api.routes.scopes import router as scopes_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(me_router)
api_router.include_router(scopes_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
