"""API routers for the event admin backend."""

from fastapi import APIRouter

from .admins import router as admins_router
from .analytics import router as analytics_router
from .events import router as events_router
from .health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(events_router)
api_router.include_router(analytics_router)
api_router.include_router(admins_router)

__all__ = ["api_router"]
