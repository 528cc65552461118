"""Admin profile repository, scoped to the authenticated principal."""

from __future__ import annotations

import logging
from typing import Optional

from app.config import ADMIN_USERS_COLLECTION
from app.domain import EventAdminError, NotAuthenticatedError, Outcome
from app.models.admins import AdminUser
from app.security.principals import PrincipalProvider
from app.stores.interfaces import DocumentStore

logger = logging.getLogger("eventadmin.admins")


class AdminRepository:
    """Reads and writes the current admin's profile document."""

    def __init__(
        self,
        store: DocumentStore,
        principals: PrincipalProvider,
        *,
        collection: str = ADMIN_USERS_COLLECTION,
    ) -> None:
        self.store = store
        self.principals = principals
        self.collection = collection

    async def get_current_admin(self) -> Outcome[Optional[AdminUser]]:
        principal = self.principals.current_principal()
        if principal is None:
            return Outcome.success(None)
        try:
            document = await self.store.get(self.collection, principal.uid)
        except EventAdminError as exc:
            logger.warning("Failed to load admin %s: %s", principal.uid, exc)
            return Outcome.failure(exc)
        if document is None:
            return Outcome.success(None)
        return Outcome.success(AdminUser.from_document(document.id, document.data))

    async def update_admin_profile(self, admin: AdminUser) -> Outcome[None]:
        """Overwrite the current principal's profile with ``admin``."""

        principal = self.principals.current_principal()
        if principal is None:
            return Outcome.failure(NotAuthenticatedError())
        return await self._write(principal.uid, admin)

    async def create_admin_profile(self, admin: AdminUser) -> Outcome[None]:
        """Store ``admin`` under the principal's id and email."""

        principal = self.principals.current_principal()
        if principal is None:
            return Outcome.failure(NotAuthenticatedError())
        profile = admin.model_copy(update={"id": principal.uid, "email": principal.email})
        return await self._write(principal.uid, profile)

    async def _write(self, uid: str, admin: AdminUser) -> Outcome[None]:
        try:
            await self.store.set(self.collection, uid, admin.to_document())
        except EventAdminError as exc:
            logger.warning("Failed to save admin %s: %s", uid, exc)
            return Outcome.failure(exc)
        logger.info("Saved admin profile %s", uid)
        return Outcome.success()


__all__ = ["AdminRepository"]
