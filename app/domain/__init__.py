"""Domain vocabulary: categories, statuses, errors and outcomes."""

from .categories import (
    DEFAULT_STATUS,
    OTHER_CATEGORY_DISPLAY,
    EventCategory,
    EventStatus,
    category_display_name,
)
from .errors import (
    BatchProgress,
    ErrorCode,
    EventAdminError,
    NotAuthenticatedError,
    NotFoundError,
    PartialBatchFailureError,
    PermissionDeniedError,
    StoreUnavailableError,
    ValidationFailedError,
)
from .results import Outcome

__all__ = [
    "BatchProgress",
    "DEFAULT_STATUS",
    "ErrorCode",
    "EventAdminError",
    "EventCategory",
    "EventStatus",
    "NotAuthenticatedError",
    "NotFoundError",
    "OTHER_CATEGORY_DISPLAY",
    "Outcome",
    "PartialBatchFailureError",
    "PermissionDeniedError",
    "StoreUnavailableError",
    "ValidationFailedError",
    "category_display_name",
]
