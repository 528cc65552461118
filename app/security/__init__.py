"""Security utilities for the event admin backend."""

from .api_keys import (
    API_KEY_HEADER,
    generate_api_key,
    hash_api_key,
    is_test_key,
    key_prefix,
)
from .dependencies import DEV_PRINCIPAL, require_principal
from .principals import Principal, PrincipalProvider, StaticPrincipalProvider

__all__ = [
    "API_KEY_HEADER",
    "DEV_PRINCIPAL",
    "Principal",
    "PrincipalProvider",
    "StaticPrincipalProvider",
    "generate_api_key",
    "hash_api_key",
    "is_test_key",
    "key_prefix",
    "require_principal",
]
