"""Event management endpoints for the admin UI."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from app.api.deps import get_event_repository, get_media_manager, http_error, require_permission
from app.domain import EventStatus, NotFoundError, Outcome, ValidationFailedError
from app.models.admins import PERMISSION_CREATE_EVENT, PERMISSION_DELETE_EVENT, PERMISSION_EDIT_EVENT
from app.models.events import (
    BatchStatusRequest,
    Event,
    EventCreateResponse,
    EventPayload,
    EventStatistics,
    ImageDeleteRequest,
    normalize_category,
)
from app.repositories import EventRepository
from app.security import Principal, require_principal
from app.services.list_controller import SortKey, ViewState, compute_statistics, derive_view
from app.services.media import MediaManager
from app.services.validation import MAX_IMAGES_PER_EVENT, validate_event

router = APIRouter(prefix="/api/v1", tags=["events"])

logger = logging.getLogger("eventadmin.api.events")


def _unwrap(outcome: Outcome):
    if not outcome.ok:
        raise http_error(outcome.error)
    return outcome.value


async def _require_event(repository: EventRepository, event_id: str) -> Event:
    event = _unwrap(await repository.get_by_id(event_id))
    if event is None:
        raise http_error(NotFoundError("Event", event_id))
    return event


def _check_valid(event: Event) -> None:
    verdict = validate_event(event, full=True)
    if not verdict.is_valid:
        raise http_error(ValidationFailedError(verdict.errors))


async def _delete_event_images(
    repository: EventRepository,
    media: MediaManager,
    event: Event,
    urls: list[str],
    *,
    persist_on_success: bool = True,
) -> None:
    """Delete ``urls`` in order and drop every URL that was removed from the event.

    On a partial failure the event is rewritten without the deleted URLs before
    the error is raised. ``persist_on_success=False`` skips the rewrite when every
    delete succeeded and the event is about to be removed anyway.
    """

    result = await media.delete_event_images(urls)
    if result.ok:
        removed = set(urls) if persist_on_success else set()
    else:
        progress = getattr(result.error, "progress", None)
        removed = set(progress.completed) if progress is not None else set()

    if removed:
        kept = [url for url in event.image_urls if url not in removed]
        _unwrap(await repository.update(event.id, event.model_copy(update={"image_urls": kept})))
    if not result.ok:
        raise http_error(result.error)


@router.get("/events", response_model=list[Event], summary="List events")
async def list_events(
    category: Optional[str] = Query(default=None, description="Category token or name"),
    event_status: Optional[EventStatus] = Query(default=None, alias="status"),
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_principal),
) -> list[Event]:
    """All events newest first, or filtered by category (by date) or status."""

    if category is not None and event_status is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filter by category or status, not both",
        )
    if category is not None:
        return _unwrap(await repository.get_by_category(normalize_category(category)))
    if event_status is not None:
        return _unwrap(await repository.get_by_status(event_status))
    return _unwrap(await repository.get_all())


@router.post(
    "/events",
    response_model=EventCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
)
async def create_event(
    payload: EventPayload,
    repository: EventRepository = Depends(get_event_repository),
    principal: Principal = Depends(require_permission(PERMISSION_CREATE_EVENT)),
) -> EventCreateResponse:
    event = payload.to_event(created_by=principal.uid)
    _check_valid(event)
    event_id = _unwrap(await repository.create(event))
    return EventCreateResponse(id=event_id, status="created")


@router.post(
    "/events/drafts",
    response_model=EventCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save an event as a draft",
)
async def save_draft(
    payload: EventPayload,
    repository: EventRepository = Depends(get_event_repository),
    principal: Principal = Depends(require_permission(PERMISSION_CREATE_EVENT)),
) -> EventCreateResponse:
    """Drafts skip validation so incomplete forms can be kept."""

    event_id = _unwrap(await repository.save_draft(payload.to_event(created_by=principal.uid)))
    return EventCreateResponse(id=event_id, status=EventStatus.DRAFT.value)


@router.get("/events/search", response_model=list[Event], summary="Search events by name prefix")
async def search_events(
    q: str = Query(..., min_length=1, description="Case-sensitive name prefix"),
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_principal),
) -> list[Event]:
    return _unwrap(await repository.search_by_name_prefix(q))


@router.get("/events/view", response_model=list[Event], summary="Filtered and sorted event list")
async def view_events(
    category: Optional[str] = Query(default=None),
    q: str = Query(default="", description="Substring matched on name, description, location"),
    sort: SortKey = Query(default=SortKey.NONE),
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_principal),
) -> list[Event]:
    events = _unwrap(await repository.get_all())
    state = ViewState(
        category=normalize_category(category) if category else None,
        search_query=q,
        sort_key=sort,
    )
    return derive_view(events, state)


@router.get("/events/statistics", response_model=EventStatistics, summary="Event counts")
async def event_statistics(
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_principal),
) -> EventStatistics:
    return compute_statistics(_unwrap(await repository.get_all()))


@router.post(
    "/events/batch-status",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Set the status of several events atomically",
)
async def batch_update_status(
    request: BatchStatusRequest,
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_permission(PERMISSION_EDIT_EVENT)),
) -> Response:
    _unwrap(await repository.batch_update_status(request.ids, request.status))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/events/{event_id}", response_model=Event, summary="Get an event")
async def get_event(
    event_id: str,
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_principal),
) -> Event:
    return await _require_event(repository, event_id)


@router.put("/events/{event_id}", response_model=Event, summary="Replace an event")
async def update_event(
    event_id: str,
    payload: EventPayload,
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_permission(PERMISSION_EDIT_EVENT)),
) -> Event:
    existing = await _require_event(repository, event_id)
    event = payload.to_event(
        id=event_id,
        created_at=existing.created_at,
        created_by=existing.created_by,
    )
    _check_valid(event)
    _unwrap(await repository.update(event_id, event))
    return await _require_event(repository, event_id)


@router.delete(
    "/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an event"
)
async def delete_event(
    event_id: str,
    delete_images: bool = Query(default=False, description="Also delete the event's images"),
    repository: EventRepository = Depends(get_event_repository),
    media: MediaManager = Depends(get_media_manager),
    _: Principal = Depends(require_permission(PERMISSION_DELETE_EVENT)),
) -> Response:
    if delete_images:
        event = await _require_event(repository, event_id)
        await _delete_event_images(
            repository, media, event, event.image_urls, persist_on_success=False
        )
    _unwrap(await repository.delete(event_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/events/{event_id}/duplicate",
    response_model=EventCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate an event",
)
async def duplicate_event(
    event_id: str,
    repository: EventRepository = Depends(get_event_repository),
    _: Principal = Depends(require_permission(PERMISSION_CREATE_EVENT)),
) -> EventCreateResponse:
    new_id = _unwrap(await repository.duplicate(event_id))
    return EventCreateResponse(id=new_id, status="duplicated")


@router.post("/events/{event_id}/images", response_model=Event, summary="Upload event images")
async def upload_images(
    event_id: str,
    files: list[UploadFile] = File(...),
    repository: EventRepository = Depends(get_event_repository),
    media: MediaManager = Depends(get_media_manager),
    _: Principal = Depends(require_permission(PERMISSION_EDIT_EVENT)),
) -> Event:
    event = await _require_event(repository, event_id)
    if len(event.image_urls) + len(files) > MAX_IMAGES_PER_EVENT:
        raise http_error(
            ValidationFailedError([f"Maximum {MAX_IMAGES_PER_EVENT} images allowed per event"])
        )

    sources = [await upload.read() for upload in files]
    urls = _unwrap(await media.upload_event_images(sources, event_id))
    updated = event.model_copy(update={"image_urls": [*event.image_urls, *urls]})
    _unwrap(await repository.update(event_id, updated))
    logger.info("Attached %s image(s) to event %s", len(urls), event_id)
    return await _require_event(repository, event_id)


@router.delete("/events/{event_id}/images", response_model=Event, summary="Delete event images")
async def delete_images(
    event_id: str,
    request: ImageDeleteRequest,
    repository: EventRepository = Depends(get_event_repository),
    media: MediaManager = Depends(get_media_manager),
    _: Principal = Depends(require_permission(PERMISSION_EDIT_EVENT)),
) -> Event:
    """Delete images in order and drop every URL that was actually removed."""

    event = await _require_event(repository, event_id)
    unknown = [url for url in request.urls if url not in event.image_urls]
    if unknown:
        raise http_error(NotFoundError("Image", unknown[0]))

    await _delete_event_images(repository, media, event, request.urls)
    return await _require_event(repository, event_id)
