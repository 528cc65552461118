"""Event models for the event admin backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.domain import EventCategory, EventStatus, category_display_name

TIMESTAMP_FIELDS = ("date", "created_at", "updated_at")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO-8601 so stored strings sort chronologically."""

    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def normalize_category(value: Any) -> str:
    """Map enum members and display names to the canonical token; keep unknowns."""

    if isinstance(value, EventCategory):
        return value.value
    if value is None:
        return ""
    text = str(value).strip()
    category = EventCategory.from_string(text)
    return category.value if category else text


class EventFields(BaseModel):
    """Editable attributes shared by stored events and incoming payloads."""

    name: str = Field(default="", description="Event name")
    description: str = Field(default="", description="Event description")
    category: str = Field(
        default="", description="Canonical category token, e.g. MUSICAL"
    )
    date: Optional[datetime] = Field(
        default=None, description="Scheduled start of the event (UTC)"
    )
    time: str = Field(default="", description="Start time as HH:MM")
    location: str = Field(default="", description="Venue or address")
    image_urls: list[str] = Field(
        default_factory=list, description="Image download URLs in display order"
    )
    participant_count: Optional[int] = Field(default=None)
    created_by: str = Field(default="", description="Principal id of the creator")
    status: EventStatus = Field(default=EventStatus.ACTIVE)
    max_attendees: int = Field(default=0)
    current_attendees: int = Field(default=0)
    ticket_price: float = Field(default=0.0)
    organizer: str = Field(default="")
    contact_email: str = Field(default="")
    contact_phone: str = Field(default="")
    tags: list[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _canonical_category(cls, value: Any) -> str:
        return normalize_category(value)

    @field_validator("date")
    @classmethod
    def _utc_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @property
    def category_enum(self) -> EventCategory | None:
        return EventCategory.from_string(self.category)

    @property
    def category_display(self) -> str:
        return category_display_name(self.category)


class Event(EventFields):
    """An event as held by the repository. ``id`` is empty until persisted."""

    id: str = Field(default="", description="Store-assigned identifier")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc_timestamps(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def to_document(self) -> dict[str, Any]:
        """Serialize to a store document; the id lives outside the body."""

        data = self.model_dump(exclude={"id"}, mode="python")
        data["status"] = self.status.value
        for key in TIMESTAMP_FIELDS:
            if data.get(key) is not None:
                data[key] = format_timestamp(data[key])
        return data

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Event:
        return cls.model_validate({**data, "id": doc_id})


class EventPayload(EventFields):
    """Incoming create/update body from the admin UI."""

    def to_event(self, **overrides: Any) -> Event:
        return Event(**{**self.model_dump(), **overrides})


class EventCreateResponse(BaseModel):
    """Response returned after creating or duplicating an event."""

    id: str = Field(..., description="Store-assigned identifier for the event")
    status: str = Field(..., description="Outcome of the submission")


class EventAnalytics(BaseModel):
    """Dashboard counters computed from store count queries."""

    total_events: int
    active_events: int
    recent_events: int = 0
    category_counts: dict[str, int] = Field(default_factory=dict)


class EventStatistics(BaseModel):
    """Counts derived from an in-memory set of events."""

    total: int
    upcoming: int
    past: int
    by_category: dict[str, int] = Field(default_factory=dict)


class BatchStatusRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)
    status: EventStatus


class ImageDeleteRequest(BaseModel):
    urls: list[str] = Field(..., min_length=1)


__all__ = [
    "BatchStatusRequest",
    "Event",
    "EventAnalytics",
    "EventCreateResponse",
    "EventFields",
    "EventPayload",
    "EventStatistics",
    "ImageDeleteRequest",
    "ensure_utc",
    "format_timestamp",
    "normalize_category",
    "utcnow",
]
