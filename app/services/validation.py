"""Validation rules applied before an event is created or updated.

Two policies live here side by side:

- structural checks (required fields, lengths, contact formats) collect every
  violation into one list;
- temporal checks (date, time format, one-hour lead time) stop at the first
  failing rule and report a single reason.

``validate_event`` runs both and appends the temporal reason, if any, after
the structural ones. Nothing in this module touches storage or mutates input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlparse

from app.models.events import Event, ensure_utc, utcnow

MIN_EVENT_NAME_LENGTH = 3
MAX_EVENT_NAME_LENGTH = 100
MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 1000
MIN_LOCATION_LENGTH = 3
MAX_IMAGES_PER_EVENT = 5
MIN_LEAD_TIME = timedelta(hours=1)

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
PHONE_PATTERN = re.compile(r"^\+?[0-9]{10,15}$")
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9+._%\-]{1,256}@[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+$"
)


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail plus the human-readable reasons for failure."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(is_valid=not errors, errors=list(errors))

    @property
    def message(self) -> str:
        return self.errors[0] if self.errors else ""


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email))


def is_valid_phone_number(phone: str) -> bool:
    return bool(PHONE_PATTERN.fullmatch(re.sub(r"\s", "", phone)))


def is_event_time_valid(time_string: str) -> bool:
    return bool(TIME_PATTERN.fullmatch(time_string))


def is_event_date_valid(event_date: datetime, now: Optional[datetime] = None) -> bool:
    """True when the event falls on today or a later day (UTC, date only)."""

    now = ensure_utc(now or utcnow())
    return ensure_utc(event_date).date() >= now.date()


def _check_length(
    errors: list[str], value: str, label: str, minimum: int, maximum: int | None = None
) -> None:
    if not value.strip():
        errors.append(f"{label} is required")
    elif len(value) < minimum:
        errors.append(f"{label} must be at least {minimum} characters")
    elif maximum is not None and len(value) > maximum:
        errors.append(f"{label} must not exceed {maximum} characters")


def validate_event_fields(event: Event, *, full: bool = True) -> ValidationResult:
    """Structural validation; aggregates every violated rule.

    With ``full`` the organizer, contact details, capacity and price are
    checked as well.
    """

    errors: list[str] = []

    _check_length(
        errors, event.name, "Event name", MIN_EVENT_NAME_LENGTH, MAX_EVENT_NAME_LENGTH
    )
    _check_length(
        errors,
        event.description,
        "Event description",
        MIN_DESCRIPTION_LENGTH,
        MAX_DESCRIPTION_LENGTH,
    )
    if not event.category.strip():
        errors.append("Event category is required")
    _check_length(errors, event.location, "Event location", MIN_LOCATION_LENGTH)
    if event.date is None:
        errors.append("Event date is required")
    if not event.time.strip():
        errors.append("Event time is required")

    if full:
        if not event.organizer.strip():
            errors.append("Organizer name is required")
        if event.contact_email.strip() and not is_valid_email(event.contact_email.strip()):
            errors.append("Invalid contact email format")
        if event.contact_phone.strip() and not is_valid_phone_number(event.contact_phone):
            errors.append("Invalid contact phone number format")
        if event.max_attendees < 0:
            errors.append("Max attendees cannot be negative")
        if event.ticket_price < 0:
            errors.append("Ticket price cannot be negative")

    return ValidationResult.from_errors(errors)


def validate_event_date_time(
    date: datetime, time: str, now: Optional[datetime] = None
) -> Optional[str]:
    """Return the first temporal violation, or None when the schedule is acceptable."""

    now = ensure_utc(now or utcnow())

    if not is_event_date_valid(date, now):
        return "Event date cannot be in the past"

    if not is_event_time_valid(time):
        return "Invalid time format. Use HH:MM format"

    hour_text, minute_text = time.split(":")
    scheduled = ensure_utc(date).replace(
        hour=int(hour_text), minute=int(minute_text), second=0, microsecond=0
    )
    if scheduled < now + MIN_LEAD_TIME:
        return "Event must be scheduled at least 1 hour in advance"

    return None


def validate_event(
    event: Event, *, now: Optional[datetime] = None, full: bool = False
) -> ValidationResult:
    """Run structural and temporal validation for a create or update."""

    errors = list(validate_event_fields(event, full=full).errors)
    if event.date is not None and event.time.strip():
        temporal = validate_event_date_time(event.date, event.time.strip(), now)
        if temporal:
            errors.append(temporal)
    return ValidationResult.from_errors(errors)


def validate_image_urls(image_urls: list[str]) -> ValidationResult:
    errors: list[str] = []

    if not image_urls:
        errors.append("At least one event image is required")
    elif len(image_urls) > MAX_IMAGES_PER_EVENT:
        errors.append(f"Maximum {MAX_IMAGES_PER_EVENT} images allowed per event")

    for url in image_urls:
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            errors.append(f"Invalid image URL format: {url}")

    return ValidationResult.from_errors(errors)


def validate_event_form(
    name: str,
    description: str,
    date: str,
    time: str,
    location: str,
    image_count: int,
) -> ValidationResult:
    """Quick check of raw form input; reports only the first problem."""

    if not name.strip():
        return ValidationResult(False, ["Event name cannot be empty"])
    if not description.strip():
        return ValidationResult(False, ["Description cannot be empty"])
    if not date.strip():
        return ValidationResult(False, ["Please select a date"])
    if not time.strip():
        return ValidationResult(False, ["Please select a time"])
    if not location.strip():
        return ValidationResult(False, ["Location cannot be empty"])
    if image_count == 0:
        return ValidationResult(False, ["Please select at least one image"])
    if not is_event_time_valid(time):
        return ValidationResult(False, ["Invalid time format"])
    return ValidationResult(True)


__all__ = [
    "MAX_IMAGES_PER_EVENT",
    "ValidationResult",
    "is_event_date_valid",
    "is_event_time_valid",
    "is_valid_email",
    "is_valid_phone_number",
    "validate_event",
    "validate_event_date_time",
    "validate_event_fields",
    "validate_event_form",
    "validate_image_urls",
]
