"""Success/failure outcome returned across repository and media boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from app.domain.errors import EventAdminError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or an ``EventAdminError``; never both."""

    value: T | None = None
    error: EventAdminError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: EventAdminError) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value or raise the carried error."""

        if self.error is not None:
            raise self.error
        return self.value

    def error_message(self) -> str:
        return self.error.message if self.error is not None else ""


__all__ = ["Outcome"]
