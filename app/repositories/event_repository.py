"""Event repository - CRUD and queries over the events collection.

Every public coroutine returns an ``Outcome``; store errors are logged and
carried back to the caller instead of being raised across this boundary.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from app.config import EVENTS_COLLECTION
from app.domain import (
    EventAdminError,
    EventCategory,
    EventStatus,
    NotFoundError,
    Outcome,
    ValidationFailedError,
)
from app.models.events import Event, EventAnalytics, format_timestamp, utcnow
from app.services.media import ImageSource, MediaManager
from app.services.validation import validate_event
from app.stores.interfaces import Direction, DocumentQuery, DocumentStore

logger = logging.getLogger("eventadmin.repository")

T = TypeVar("T")

DEFAULT_RECENT_WINDOW = timedelta(days=30)


def _status_value(status: EventStatus | str) -> str:
    try:
        return EventStatus(status).value
    except ValueError as exc:
        raise ValidationFailedError([f"Unknown event status: {status}"]) from exc


class EventRepository:
    """Persistence operations for events."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: str = EVENTS_COLLECTION,
        clock: Optional[Callable[[], datetime]] = None,
        recent_window: timedelta = DEFAULT_RECENT_WINDOW,
    ) -> None:
        self.store = store
        self.collection = collection
        self._clock = clock or utcnow
        self.recent_window = recent_window

    async def _guard(self, operation: str, call: Callable[[], Awaitable[T]]) -> Outcome[T]:
        try:
            return Outcome.success(await call())
        except EventAdminError as exc:
            logger.warning("Event %s failed: %s", operation, exc)
            return Outcome.failure(exc)

    async def _find(self, query: DocumentQuery) -> list[Event]:
        documents = await self.store.query(self.collection, query)
        return [Event.from_document(doc.id, doc.data) for doc in documents]

    async def create(self, event: Event) -> Outcome[str]:
        async def _create() -> str:
            event_id = await self.store.insert(self.collection, event.to_document())
            logger.info("Created event %s (%s)", event_id, event.name)
            return event_id

        return await self._guard("create", _create)

    async def update(self, event_id: str, event: Event) -> Outcome[None]:
        """Overwrite the whole document at ``event_id`` and refresh ``updated_at``."""

        async def _update() -> None:
            refreshed = event.model_copy(update={"id": event_id, "updated_at": self._clock()})
            await self.store.set(self.collection, event_id, refreshed.to_document())
            logger.info("Updated event %s", event_id)

        return await self._guard("update", _update)

    async def delete(self, event_id: str) -> Outcome[None]:
        """Remove the document. Associated images are the caller's to delete."""

        async def _delete() -> None:
            await self.store.delete(self.collection, event_id)
            logger.info("Deleted event %s", event_id)

        return await self._guard("delete", _delete)

    async def duplicate(self, event_id: str) -> Outcome[str]:
        """Copy an event into a new document and return the new id."""

        found = await self.get_by_id(event_id)
        if not found.ok:
            return Outcome.failure(found.error)
        if found.value is None:
            logger.warning("Cannot duplicate missing event %s", event_id)
            return Outcome.failure(NotFoundError("Event", event_id))
        return await self.create(found.value.model_copy(update={"id": ""}))

    async def get_by_id(self, event_id: str) -> Outcome[Optional[Event]]:
        async def _get() -> Optional[Event]:
            document = await self.store.get(self.collection, event_id)
            if document is None:
                return None
            return Event.from_document(document.id, document.data)

        return await self._guard("lookup", _get)

    async def get_all(self) -> Outcome[list[Event]]:
        query = DocumentQuery().order_by("created_at", Direction.DESCENDING)
        return await self._guard("list", lambda: self._find(query))

    async def get_by_category(self, category: EventCategory | str) -> Outcome[list[Event]]:
        token = category.value if isinstance(category, EventCategory) else category
        query = DocumentQuery().where("category", "==", token).order_by("date")
        return await self._guard("category filter", lambda: self._find(query))

    async def get_by_status(self, status: EventStatus | str) -> Outcome[list[Event]]:
        async def _by_status() -> list[Event]:
            query = (
                DocumentQuery()
                .where("status", "==", _status_value(status))
                .order_by("created_at", Direction.DESCENDING)
            )
            return await self._find(query)

        return await self._guard("status filter", _by_status)

    async def search_by_name_prefix(self, query_text: str) -> Outcome[list[Event]]:
        """Names starting with ``query_text`` (case-sensitive), ordered by name."""

        query = DocumentQuery().prefix("name", query_text)
        return await self._guard("prefix search", lambda: self._find(query))

    async def get_analytics(self) -> Outcome[EventAnalytics]:
        """Dashboard counters, one count query per figure."""

        async def _analytics() -> EventAnalytics:
            total = await self.store.count(self.collection)
            category_counts: dict[str, int] = {}
            for category in EventCategory:
                category_counts[category.value] = await self.store.count(
                    self.collection, DocumentQuery().where("category", "==", category.value)
                )
            active = await self.store.count(
                self.collection,
                DocumentQuery().where("status", "==", EventStatus.ACTIVE.value),
            )
            since = format_timestamp(self._clock() - self.recent_window)
            recent = await self.store.count(
                self.collection, DocumentQuery().where("created_at", ">", since)
            )
            return EventAnalytics(
                total_events=total,
                active_events=active,
                recent_events=recent,
                category_counts=category_counts,
            )

        return await self._guard("analytics", _analytics)

    async def batch_update_status(
        self, event_ids: Sequence[str], status: EventStatus | str
    ) -> Outcome[None]:
        """Set ``status`` on every id in one transaction; all or nothing."""

        async def _batch() -> None:
            fields = {
                "status": _status_value(status),
                "updated_at": format_timestamp(self._clock()),
            }
            await self.store.batch_update(self.collection, list(event_ids), fields)
            logger.info("Set status %s on %s events", fields["status"], len(event_ids))

        return await self._guard("batch status update", _batch)

    async def save_draft(self, event: Event) -> Outcome[str]:
        return await self.create(event.model_copy(update={"status": EventStatus.DRAFT}))

    async def create_with_images(
        self,
        event: Event,
        images: Sequence[ImageSource],
        media: MediaManager,
        *,
        now: Optional[datetime] = None,
    ) -> Outcome[str]:
        """Validate, create the document, upload images, then store their URLs.

        If the upload fails the event document stays in place without the new
        images and the upload error is returned.
        """

        verdict = validate_event(event, now=now or self._clock(), full=True)
        if not verdict.is_valid:
            return Outcome.failure(ValidationFailedError(verdict.errors))

        created = await self.create(event)
        if not created.ok or not images:
            return created
        event_id = created.value

        uploaded = await media.upload_event_images(images, event_id)
        if not uploaded.ok:
            return Outcome.failure(uploaded.error)

        with_images = event.model_copy(
            update={"image_urls": [*event.image_urls, *uploaded.value]}
        )
        updated = await self.update(event_id, with_images)
        if not updated.ok:
            return Outcome.failure(updated.error)
        return Outcome.success(event_id)


__all__ = ["EventRepository"]
