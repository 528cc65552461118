"""Dashboard analytics endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_event_repository, http_error, require_permission
from app.models.admins import PERMISSION_VIEW_ANALYTICS
from app.models.events import EventAnalytics
from app.repositories import EventRepository
from app.security import Principal

router = APIRouter(prefix="/api/v1", tags=["analytics"])

logger = logging.getLogger("eventadmin.api.analytics")


@router.get("/analytics", response_model=EventAnalytics, summary="Event dashboard counters")
async def get_analytics(
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_permission(PERMISSION_VIEW_ANALYTICS)),
) -> EventAnalytics:
    result = await repository.get_analytics()
    if not result.ok:
        raise http_error(result.error)

    analytics = result.value
    logger.info(
        "Analytics computed: total=%s active=%s recent=%s",
        analytics.total_events,
        analytics.active_events,
        analytics.recent_events,
    )
    return analytics
