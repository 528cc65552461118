"""Repositories over the document store."""

from .admin_repository import AdminRepository
from .event_repository import EventRepository

__all__ = ["AdminRepository", "EventRepository"]
