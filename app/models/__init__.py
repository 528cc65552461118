"""Pydantic models for the event admin backend."""

from .admins import AdminProfileUpdate, AdminUser
from .events import (
    BatchStatusRequest,
    Event,
    EventAnalytics,
    EventCreateResponse,
    EventPayload,
    EventStatistics,
    ImageDeleteRequest,
)

__all__ = [
    "AdminProfileUpdate",
    "AdminUser",
    "BatchStatusRequest",
    "Event",
    "EventAnalytics",
    "EventCreateResponse",
    "EventPayload",
    "EventStatistics",
    "ImageDeleteRequest",
]
