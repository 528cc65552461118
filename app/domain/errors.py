"""Error taxonomy shared by stores, repositories and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    STORE_UNAVAILABLE = "store_unavailable"
    PARTIAL_BATCH_FAILURE = "partial_batch_failure"
    NOT_AUTHENTICATED = "not_authenticated"
    PERMISSION_DENIED = "permission_denied"


class EventAdminError(Exception):
    """Base error carrying a code and a user-safe message."""

    code: ErrorCode = ErrorCode.STORE_UNAVAILABLE

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_detail(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


class NotFoundError(EventAdminError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class ValidationFailedError(EventAdminError):
    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, reasons: list[str]) -> None:
        super().__init__("; ".join(reasons) or "Validation failed")
        self.reasons = list(reasons)

    def to_detail(self) -> dict[str, Any]:
        return {**super().to_detail(), "reasons": self.reasons}


class StoreUnavailableError(EventAdminError):
    """Backend failure; callers may retry."""

    code = ErrorCode.STORE_UNAVAILABLE


class NotAuthenticatedError(EventAdminError):
    code = ErrorCode.NOT_AUTHENTICATED

    def __init__(self, message: str = "No authenticated user") -> None:
        super().__init__(message)


class PermissionDeniedError(EventAdminError):
    code = ErrorCode.PERMISSION_DENIED

    def __init__(self, permission: str) -> None:
        super().__init__(f"Missing permission: {permission}")
        self.permission = permission


@dataclass
class BatchProgress:
    """Step ledger for a sequential batch: what finished, what broke, what never ran."""

    completed: list[str] = field(default_factory=list)
    failed: str | None = None
    remaining: list[str] = field(default_factory=list)
    rolled_back: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.completed) and self.failed is not None


class PartialBatchFailureError(EventAdminError):
    code = ErrorCode.PARTIAL_BATCH_FAILURE

    def __init__(
        self, operation: str, progress: BatchProgress, cause: Exception | None = None
    ) -> None:
        super().__init__(
            f"{operation} failed after {len(progress.completed)} completed step(s)"
        )
        self.operation = operation
        self.progress = progress
        self.cause = cause

    def to_detail(self) -> dict[str, Any]:
        return {
            **super().to_detail(),
            "completed": self.progress.completed,
            "failed": self.progress.failed,
            "remaining": self.progress.remaining,
        }


__all__ = [
    "BatchProgress",
    "ErrorCode",
    "EventAdminError",
    "NotAuthenticatedError",
    "NotFoundError",
    "PartialBatchFailureError",
    "PermissionDeniedError",
    "StoreUnavailableError",
    "ValidationFailedError",
]
