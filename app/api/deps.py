"""Dependency wiring shared by the API routers."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Callable

from fastapi import Depends, HTTPException, status

from app.config import settings
from app.domain import EventAdminError, ErrorCode, PermissionDeniedError
from app.repositories import AdminRepository, EventRepository
from app.security import Principal, StaticPrincipalProvider, require_principal
from app.services.media import MediaManager
from app.stores import BlobStore, DocumentStore, SqlDocumentStore, build_blob_store

_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.PARTIAL_BATCH_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
}


def http_error(error: EventAdminError) -> HTTPException:
    """Translate a domain error into an HTTP response with a stable code."""

    return HTTPException(
        status_code=_STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.to_detail(),
    )


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    return SqlDocumentStore()


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    return build_blob_store(settings)


def get_event_repository(
    store: DocumentStore = Depends(get_document_store),
) -> EventRepository:
    return EventRepository(store, recent_window=timedelta(days=settings.recent_window_days))


def get_media_manager(blob_store: BlobStore = Depends(get_blob_store)) -> MediaManager:
    return MediaManager(
        blob_store,
        prefix=settings.image_prefix,
        rollback_on_failure=settings.media_rollback_uploads,
    )


def get_admin_repository(
    principal: Principal = Depends(require_principal),
    store: DocumentStore = Depends(get_document_store),
) -> AdminRepository:
    return AdminRepository(store, StaticPrincipalProvider(principal))


def require_permission(permission: str) -> Callable:
    """Dependency factory: the caller's admin profile must grant ``permission``."""

    async def _check(
        admins: AdminRepository = Depends(get_admin_repository),
    ) -> Principal:
        principal = admins.principals.current_principal()
        if not settings.require_api_key:
            return principal
        found = await admins.get_current_admin()
        if not found.ok:
            raise http_error(found.error)
        admin = found.value
        if admin is None or not admin.is_active or not admin.has_permission(permission):
            raise http_error(PermissionDeniedError(permission))
        return principal

    return _check


__all__ = [
    "get_admin_repository",
    "get_blob_store",
    "get_document_store",
    "get_event_repository",
    "get_media_manager",
    "http_error",
    "require_permission",
]
