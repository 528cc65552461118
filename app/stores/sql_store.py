"""SQLAlchemy implementation of the DocumentStore.

Documents live in a single ``documents`` table as JSON bodies keyed by
``(collection, id)``. Field filters and ordering compile to the backend's JSON
extraction operators, so SQLite (JSON1) and PostgreSQL both work.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Sequence, TypeVar
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.db import SessionLocal
from app.db_models import DocumentRecord
from app.domain import NotFoundError, StoreUnavailableError
from app.stores.interfaces import (
    Direction,
    Document,
    DocumentQuery,
    DocumentStore,
    FieldFilter,
    FilterOp,
)

logger = logging.getLogger("eventadmin.stores.sql")

T = TypeVar("T")


def _generate_id() -> str:
    return uuid4().hex[:20]


def _json_field(name: str, value: Any = None):
    element = DocumentRecord.data[name]
    if isinstance(value, bool):
        return element.as_boolean()
    if isinstance(value, (int, float)):
        return element.as_float()
    return element.as_string()


def _compile_filter(flt: FieldFilter):
    column = _json_field(flt.field, flt.value)
    if flt.op is FilterOp.EQ:
        return column == flt.value
    if flt.op is FilterOp.GT:
        return column > flt.value
    if flt.op is FilterOp.GTE:
        return column >= flt.value
    if flt.op is FilterOp.LT:
        return column < flt.value
    return column <= flt.value


class SqlDocumentStore(DocumentStore):
    """Document store backed by a relational database through SQLAlchemy."""

    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        *,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionLocal
        self._id_factory = id_factory or _generate_id

    async def _run(self, func_: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func_, *args)
        except SQLAlchemyError as exc:
            logger.error("Document store operation %s failed: %s", func_.__name__, exc)
            raise StoreUnavailableError("Document store unavailable") from exc

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        return await self._run(self._insert, collection, dict(data))

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await self._run(self._get, collection, doc_id)

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        await self._run(self._set, collection, doc_id, dict(data))

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._run(self._delete, collection, doc_id)

    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        return await self._run(self._query, collection, query)

    async def count(self, collection: str, query: DocumentQuery | None = None) -> int:
        return await self._run(self._count, collection, query or DocumentQuery())

    async def batch_update(
        self, collection: str, doc_ids: Sequence[str], fields: Mapping[str, Any]
    ) -> None:
        await self._run(self._batch_update, collection, list(doc_ids), dict(fields))

    def _insert(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = self._id_factory()
        with self._session_factory() as session:
            session.add(DocumentRecord(collection=collection, id=doc_id, data=data))
            session.commit()
        return doc_id

    def _get(self, collection: str, doc_id: str) -> Document | None:
        with self._session_factory() as session:
            record = session.get(DocumentRecord, (collection, doc_id))
            if record is None:
                return None
            return Document(id=record.id, data=dict(record.data))

    def _set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._session_factory() as session:
            record = session.get(DocumentRecord, (collection, doc_id))
            if record is None:
                session.add(DocumentRecord(collection=collection, id=doc_id, data=data))
            else:
                record.data = data
            session.commit()

    def _delete(self, collection: str, doc_id: str) -> None:
        with self._session_factory() as session:
            record = session.get(DocumentRecord, (collection, doc_id))
            if record is not None:
                session.delete(record)
                session.commit()

    def _statement(self, collection: str, query: DocumentQuery):
        stmt = select(DocumentRecord).where(DocumentRecord.collection == collection)
        for flt in query.filters:
            stmt = stmt.where(_compile_filter(flt))
        for order in query.ordering:
            column = _json_field(order.field)
            stmt = stmt.order_by(
                column.desc() if order.direction is Direction.DESCENDING else column.asc()
            )
        return stmt.order_by(DocumentRecord.id)

    def _query(self, collection: str, query: DocumentQuery) -> list[Document]:
        stmt = self._statement(collection, query)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        with self._session_factory() as session:
            records = session.scalars(stmt).all()
            return [Document(id=record.id, data=dict(record.data)) for record in records]

    def _count(self, collection: str, query: DocumentQuery) -> int:
        stmt = select(func.count()).select_from(DocumentRecord).where(
            DocumentRecord.collection == collection
        )
        for flt in query.filters:
            stmt = stmt.where(_compile_filter(flt))
        with self._session_factory() as session:
            return int(session.scalar(stmt) or 0)

    def _batch_update(
        self, collection: str, doc_ids: list[str], fields: dict[str, Any]
    ) -> None:
        with self._session_factory() as session, session.begin():
            for doc_id in doc_ids:
                record = session.get(DocumentRecord, (collection, doc_id))
                if record is None:
                    # Leaving the begin() block with an exception rolls back.
                    raise NotFoundError("Document", doc_id)
                record.data = {**record.data, **fields}
        logger.debug("Batch updated %s documents in %s", len(doc_ids), collection)


__all__ = ["SqlDocumentStore"]
