"""API key generation and hashing helpers."""

from __future__ import annotations

import hmac
import secrets
from hashlib import sha256

API_KEY_HEADER = "X-EventAdmin-API-Key"
DEFAULT_KEY_PREFIX = "sk_eventadmin"
TEST_KEY_PREFIX = "sk_test"


def generate_api_key(prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """Return ``<prefix>_<hex>`` with 32 random bytes of hex."""

    return f"{prefix}_{secrets.token_hex(32)}"


def key_prefix(api_key: str, length: int = 8) -> str:
    """Short lookup prefix taken from the random part of the key."""

    cleaned = api_key.strip()
    if "_" in cleaned:
        cleaned = cleaned.rsplit("_", maxsplit=1)[-1]
    return cleaned[:length]


def hash_api_key(api_key: str, pepper: str) -> str:
    if not pepper:
        raise ValueError("API key pepper must be configured to hash keys")
    return hmac.new(pepper.encode(), api_key.encode(), sha256).hexdigest()


def is_test_key(api_key: str) -> bool:
    return api_key.startswith(f"{TEST_KEY_PREFIX}_")
