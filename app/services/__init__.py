"""Service-layer helpers for the event admin backend."""

from .media import DEFAULT_IMAGE_PREFIX, ImageSource, MediaManager
from .validation import (
    MAX_IMAGES_PER_EVENT,
    ValidationResult,
    validate_event,
    validate_event_date_time,
    validate_event_fields,
    validate_event_form,
    validate_image_urls,
)

__all__ = [
    "DEFAULT_IMAGE_PREFIX",
    "ImageSource",
    "MAX_IMAGES_PER_EVENT",
    "MediaManager",
    "ValidationResult",
    "validate_event",
    "validate_event_date_time",
    "validate_event_fields",
    "validate_event_form",
    "validate_image_urls",
]
