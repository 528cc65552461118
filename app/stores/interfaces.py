"""Store interfaces (repository pattern).

Stores must be swappable. Implementations raise ``StoreUnavailableError`` for
backend failures and ``NotFoundError`` only where noted; everything else about
a missing id is lenient, as with most document stores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Sequence

# Highest BMP private-use code point; appended to a prefix it bounds a range scan.
HIGH_SENTINEL = "\uf8ff"


class Direction(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class FilterOp(str, Enum):
    EQ = "=="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="


@dataclass(frozen=True)
class FieldFilter:
    field: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: Direction = Direction.ASCENDING


@dataclass(frozen=True)
class DocumentQuery:
    """Immutable query description; builder methods return new instances."""

    filters: tuple[FieldFilter, ...] = ()
    ordering: tuple[OrderBy, ...] = ()
    limit: int | None = None

    def where(self, field_name: str, op: FilterOp | str, value: Any) -> DocumentQuery:
        return replace(
            self, filters=self.filters + (FieldFilter(field_name, FilterOp(op), value),)
        )

    def order_by(
        self, field_name: str, direction: Direction = Direction.ASCENDING
    ) -> DocumentQuery:
        return replace(self, ordering=self.ordering + (OrderBy(field_name, direction),))

    def prefix(self, field_name: str, value: str) -> DocumentQuery:
        """Lexicographic range ``[value, value + HIGH_SENTINEL]`` ordered by the field."""

        return (
            self.where(field_name, FilterOp.GTE, value)
            .where(field_name, FilterOp.LTE, value + HIGH_SENTINEL)
            .order_by(field_name)
        )

    def limited(self, limit: int) -> DocumentQuery:
        return replace(self, limit=limit)


@dataclass(frozen=True)
class Document:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """Collection-scoped document persistence."""

    @abstractmethod
    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        """Store a new document and return its generated id."""
        ...

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Return the document, or None when the id does not resolve."""
        ...

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Overwrite the whole document at ``doc_id``, creating it if absent."""
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document; deleting a missing id is not an error."""
        ...

    @abstractmethod
    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        ...

    @abstractmethod
    async def count(self, collection: str, query: DocumentQuery | None = None) -> int:
        ...

    @abstractmethod
    async def batch_update(
        self, collection: str, doc_ids: Sequence[str], fields: Mapping[str, Any]
    ) -> None:
        """Merge ``fields`` into every listed document atomically.

        Raises:
            NotFoundError: If any id is missing; no document is changed.
        """
        ...


class BlobStore(ABC):
    """Opaque object storage for event media."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """Store ``data`` under ``key`` and return a stable download URL."""
        ...

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Delete the object behind a URL previously returned by ``put``."""
        ...


__all__ = [
    "BlobStore",
    "Direction",
    "Document",
    "DocumentQuery",
    "DocumentStore",
    "FieldFilter",
    "FilterOp",
    "HIGH_SENTINEL",
    "OrderBy",
]
