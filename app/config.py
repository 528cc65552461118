"""Configuration settings for the event admin backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger("eventadmin.config")

AWS_REGION = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"

EVENTS_COLLECTION = "events"
ADMIN_USERS_COLLECTION = "admin_users"


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def get_api_key_pepper() -> str:
    """Return the API key pepper from the environment or AWS SSM Parameter Store.

    The SSM value is cached in-memory to avoid repeated calls. Any failure to
    retrieve it results in a runtime error so callers can fail fast.
    """

    from_env = os.getenv("EVENTADMIN_API_KEY_PEPPER")
    if from_env:
        return from_env

    parameter = os.getenv("EVENTADMIN_PEPPER_PARAMETER", "/eventadmin/api_key_pepper")
    try:
        client = boto3.client("ssm", region_name=AWS_REGION)
        response = client.get_parameter(Name=parameter, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load API key pepper from SSM: %s", exc)
        raise RuntimeError("Unable to load API key pepper from SSM") from exc

    if not value:
        logger.error("Received empty API key pepper from SSM")
        raise RuntimeError("API key pepper not configured in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    eventadmin_env: str = os.getenv("EVENTADMIN_ENV", "local")
    log_level: str = os.getenv("EVENTADMIN_LOG_LEVEL", "INFO")

    # Document store
    database_url: str = os.getenv("EVENTADMIN_DB_URL", "sqlite:///./eventadmin.db")

    # Blob store
    blob_backend: str = os.getenv("EVENTADMIN_BLOB_BACKEND", "local").lower()
    aws_region: str = AWS_REGION
    s3_bucket: str = os.getenv("EVENTADMIN_S3_BUCKET", "")
    s3_public_base_url: str | None = os.getenv("EVENTADMIN_S3_PUBLIC_BASE_URL")
    local_media_dir: str = os.getenv("EVENTADMIN_LOCAL_MEDIA_DIR", "./media")
    local_media_base_url: str = os.getenv(
        "EVENTADMIN_LOCAL_MEDIA_BASE_URL", "http://localhost:8000/media"
    )
    image_prefix: str = os.getenv("EVENTADMIN_IMAGE_PREFIX", "event_images")
    media_rollback_uploads: bool = _get_bool("EVENTADMIN_MEDIA_ROLLBACK_UPLOADS")

    # Analytics
    recent_window_days: int = int(os.getenv("EVENTADMIN_RECENT_WINDOW_DAYS", "30"))

    # API key authentication
    api_key_pepper: str = ""
    require_api_key: bool = _get_bool(
        "REQUIRE_API_KEY",
        default=os.getenv("EVENTADMIN_ENV", "local").lower()
        in {"prod", "production"},
    )


settings = Settings()

# Populate the pepper lazily so tests can override behavior via env
try:
    settings.api_key_pepper = get_api_key_pepper()
except RuntimeError:
    logger.warning("API key pepper not available at import time")

__all__ = [
    "ADMIN_USERS_COLLECTION",
    "EVENTS_COLLECTION",
    "Settings",
    "get_api_key_pepper",
    "settings",
]
