"""List controller: the authoritative event set plus a derived, filtered view.

The controller keeps the last full result fetched from the repository and a
``ViewState`` (category, search text, sort key). The derived view is always
recomputed from those two values, never patched in place, so a filter change
after a sort keeps the sort and a reload starts from a clean state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional

from app.domain import EventCategory
from app.models.events import Event, EventStatistics, ensure_utc, normalize_category, utcnow
from app.repositories.event_repository import EventRepository

logger = logging.getLogger("eventadmin.list_controller")

Listener = Callable[["EventListController"], None]


class SortKey(str, Enum):
    NONE = "none"
    DATE = "date"
    NAME = "name"
    CATEGORY = "category"


@dataclass(frozen=True)
class ViewState:
    """What the user has asked to see; immutable, replaced on every change."""

    category: Optional[str] = None
    search_query: str = ""
    sort_key: SortKey = SortKey.NONE


def matches_query(event: Event, query: str) -> bool:
    """Case-insensitive substring match on name, description or location."""

    needle = query.lower()
    return (
        needle in event.name.lower()
        or needle in event.description.lower()
        or needle in event.location.lower()
    )


def sort_events(events: Iterable[Event], sort_key: SortKey) -> list[Event]:
    """Stable sort; events without a date go last when sorting by date."""

    if sort_key is SortKey.DATE:
        return sorted(
            events,
            key=lambda e: (e.date is None, e.date.timestamp() if e.date else 0.0),
        )
    if sort_key is SortKey.NAME:
        return sorted(events, key=lambda e: e.name.lower())
    if sort_key is SortKey.CATEGORY:
        return sorted(events, key=lambda e: e.category)
    return list(events)


def derive_view(events: Iterable[Event], state: ViewState) -> list[Event]:
    """Category filter first, then text search, then sort."""

    result = list(events)
    if state.category is not None:
        token = normalize_category(state.category)
        result = [e for e in result if e.category == token]
    if state.search_query:
        result = [e for e in result if matches_query(e, state.search_query)]
    return sort_events(result, state.sort_key)


def compute_statistics(
    events: Iterable[Event], now: Optional[datetime] = None
) -> EventStatistics:
    now = ensure_utc(now or utcnow())
    items = list(events)
    upcoming = sum(1 for e in items if e.date is not None and e.date >= now)
    by_category = {
        category.value.lower(): sum(1 for e in items if e.category == category.value)
        for category in EventCategory
    }
    return EventStatistics(
        total=len(items),
        upcoming=upcoming,
        past=len(items) - upcoming,
        by_category=by_category,
    )


class EventListController:
    """Presentation-facing state for the admin event list."""

    def __init__(self, repository: EventRepository) -> None:
        self.repository = repository
        self.all_events: list[Event] = []
        self.filtered_events: list[Event] = []
        self.view_state = ViewState()
        self.is_loading = False
        self.error_message = ""
        self.delete_result: Optional[bool] = None
        self._latest_token = 0
        self._listeners: list[Listener] = []

    @property
    def events(self) -> list[Event]:
        return self.filtered_events

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every state change; returns an unsubscribe hook."""

        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def load(self) -> bool:
        """Fetch every event and reset the view. Stale responses are dropped."""

        self._latest_token += 1
        token = self._latest_token
        self.is_loading = True
        self.error_message = ""
        self._notify()

        result = await self.repository.get_all()
        if token != self._latest_token:
            logger.debug("Discarding stale load response %s (latest %s)", token, self._latest_token)
            return False

        self.is_loading = False
        if result.ok:
            self.all_events = list(result.value or [])
            self.view_state = ViewState()
            self.filtered_events = list(self.all_events)
        else:
            self.error_message = f"Failed to load events: {result.error_message()}"
        self._notify()
        return result.ok

    async def refresh(self) -> bool:
        return await self.load()

    def _apply(self, state: ViewState) -> None:
        self.view_state = state
        self.filtered_events = derive_view(self.all_events, state)
        self._notify()

    def filter_by_category(self, category: EventCategory | str | None) -> None:
        """Show only events whose stored token matches; unknown tokens match nothing."""

        if category is not None:
            category = normalize_category(category) or None
        self._apply(replace(self.view_state, category=category))

    def search(self, query: str) -> None:
        self._apply(replace(self.view_state, search_query=query))

    def sort_by_date(self) -> None:
        self._apply(replace(self.view_state, sort_key=SortKey.DATE))

    def sort_by_name(self) -> None:
        self._apply(replace(self.view_state, sort_key=SortKey.NAME))

    def sort_by_category(self) -> None:
        self._apply(replace(self.view_state, sort_key=SortKey.CATEGORY))

    async def delete(self, event_id: str) -> bool:
        self.is_loading = True
        self.error_message = ""
        self._notify()

        result = await self.repository.delete(event_id)
        self.is_loading = False
        self.delete_result = result.ok
        if result.ok:
            self.all_events = [e for e in self.all_events if e.id != event_id]
            self.filtered_events = [e for e in self.filtered_events if e.id != event_id]
        else:
            self.error_message = f"Failed to delete event: {result.error_message()}"
        self._notify()
        return result.ok

    def get_statistics(self, now: Optional[datetime] = None) -> EventStatistics:
        """Counts over the authoritative set; the view state plays no part."""

        return compute_statistics(self.all_events, now)


__all__ = [
    "EventListController",
    "SortKey",
    "ViewState",
    "compute_statistics",
    "derive_view",
    "matches_query",
    "sort_events",
]
