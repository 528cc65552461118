"""Event category and status enumerations."""

from __future__ import annotations

from enum import Enum

OTHER_CATEGORY_DISPLAY = "Other"


class EventCategory(str, Enum):
    """Closed set of event categories, persisted by member name."""

    MUSICAL = "MUSICAL"
    SPORTS = "SPORTS"
    FOOD = "FOOD"
    ART = "ART"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_string(cls, category: str | None) -> EventCategory | None:
        """Return the member matching ``category`` case-insensitively, else None."""

        if not category:
            return None
        token = category.strip().upper()
        for member in cls:
            if member.name == token:
                return member
        return None

    @classmethod
    def all_display_names(cls) -> list[str]:
        return [member.display_name for member in cls]


def category_display_name(token: str | None) -> str:
    """Display string for a stored category token; unknown tokens show as Other."""

    category = EventCategory.from_string(token)
    return category.display_name if category else OTHER_CATEGORY_DISPLAY


class EventStatus(str, Enum):
    """Lifecycle status of an event."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    DRAFT = "draft"
    COMPLETED = "completed"


DEFAULT_STATUS: EventStatus = EventStatus.ACTIVE

__all__ = [
    "DEFAULT_STATUS",
    "EventCategory",
    "EventStatus",
    "OTHER_CATEGORY_DISPLAY",
    "category_display_name",
]
