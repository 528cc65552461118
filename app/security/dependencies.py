"""FastAPI dependencies resolving the calling admin principal."""

from __future__ import annotations

import hmac
import logging
from datetime import datetime

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from app import db_models
from app.config import settings
from app.db import get_db
from app.security.api_keys import API_KEY_HEADER, hash_api_key, is_test_key, key_prefix
from app.security.principals import Principal

logger = logging.getLogger("eventadmin.security")

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)

DEV_PRINCIPAL = Principal(uid="dev-admin", email="dev-admin@localhost", label="bypass")


def _auth_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


def _lookup_principal(db: Session, provided_key: str) -> Principal:
    stored = db.query(db_models.ApiKey).filter_by(key_prefix=key_prefix(provided_key)).first()
    if not stored:
        raise _auth_error(status.HTTP_401_UNAUTHORIZED, "api_key_invalid", "Invalid API key")

    if stored.revoked_at is not None:
        raise _auth_error(status.HTTP_403_FORBIDDEN, "api_key_revoked", "API key has been revoked")

    if stored.expires_at is not None and stored.expires_at <= datetime.utcnow():
        raise _auth_error(status.HTTP_403_FORBIDDEN, "api_key_expired", "API key has expired")

    if not settings.api_key_pepper:
        logger.error("API key pepper is not configured; rejecting request")
        raise _auth_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "api_key_misconfigured",
            "API key pepper is not configured",
        )

    computed = hash_api_key(provided_key, settings.api_key_pepper)
    if not hmac.compare_digest(computed, stored.key_hash):
        raise _auth_error(status.HTTP_401_UNAUTHORIZED, "api_key_invalid", "Invalid API key")

    try:  # best effort; do not block requests on bookkeeping
        stored.last_used_at = datetime.utcnow()
        db.commit()
    except Exception:  # pragma: no cover - fail soft
        db.rollback()
        logger.debug("Failed to update API key last-used time", exc_info=True)

    return Principal(uid=stored.principal_id, email=stored.holder_email, label=stored.holder_label)


async def require_principal(
    api_key: str | None = Security(api_key_header),
    db: Session = Depends(get_db),
) -> Principal:
    """Authenticate the request and return the admin principal behind the key."""

    if not settings.require_api_key:
        return DEV_PRINCIPAL

    if not api_key or not api_key.strip():
        raise _auth_error(status.HTTP_401_UNAUTHORIZED, "api_key_missing", "API key header is required")

    provided_key = api_key.strip()
    if is_test_key(provided_key) and settings.eventadmin_env.lower() not in {"test", "testing"}:
        raise _auth_error(
            status.HTTP_403_FORBIDDEN,
            "api_key_test_only",
            "Test API keys are not accepted in this environment",
        )

    return _lookup_principal(db, provided_key)
