"""Health check endpoint."""

from fastapi import APIRouter
from app.config import settings

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check() -> dict[str, str]:
    return {"status": "ok", "env": settings.eventadmin_env}
