"""Admin user models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.events import ensure_utc, format_timestamp, utcnow

PERMISSION_CREATE_EVENT = "create_event"
PERMISSION_EDIT_EVENT = "edit_event"
PERMISSION_DELETE_EVENT = "delete_event"
PERMISSION_VIEW_ANALYTICS = "view_analytics"

DEFAULT_PERMISSIONS: tuple[str, ...] = (
    PERMISSION_CREATE_EVENT,
    PERMISSION_EDIT_EVENT,
    PERMISSION_DELETE_EVENT,
    PERMISSION_VIEW_ANALYTICS,
)


class AdminUser(BaseModel):
    """Admin profile keyed by the authenticated principal id."""

    id: str = Field(default="", description="Authenticated principal id")
    email: str = Field(default="")
    name: str = Field(default="")
    role: str = Field(default="admin")
    permissions: list[str] = Field(default_factory=lambda: list(DEFAULT_PERMISSIONS))
    created_at: datetime = Field(default_factory=utcnow)
    last_login: datetime = Field(default_factory=utcnow)
    is_active: bool = Field(default=True)
    profile_image_url: str = Field(default="")
    department: str = Field(default="")
    phone_number: str = Field(default="")

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def to_document(self) -> dict:
        data = self.model_dump(exclude={"id"})
        data["created_at"] = format_timestamp(self.created_at)
        data["last_login"] = format_timestamp(self.last_login)
        return data

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> AdminUser:
        admin = cls.model_validate({**data, "id": doc_id})
        admin.created_at = ensure_utc(admin.created_at)
        admin.last_login = ensure_utc(admin.last_login)
        return admin


class AdminProfileUpdate(BaseModel):
    """Editable profile fields accepted from the admin UI."""

    name: str = Field(default="")
    department: str = Field(default="")
    phone_number: str = Field(default="")
    profile_image_url: str = Field(default="")


__all__ = [
    "AdminProfileUpdate",
    "AdminUser",
    "DEFAULT_PERMISSIONS",
    "PERMISSION_CREATE_EVENT",
    "PERMISSION_DELETE_EVENT",
    "PERMISSION_EDIT_EVENT",
    "PERMISSION_VIEW_ANALYTICS",
]
