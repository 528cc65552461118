"""Authenticated principal and the provider seam used to scope admin data."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """Identity of the caller as established by authentication."""

    uid: str
    email: str
    label: str | None = None


class PrincipalProvider(ABC):
    @abstractmethod
    def current_principal(self) -> Principal | None:
        """Return the signed-in principal, or None when unauthenticated."""
        ...


class StaticPrincipalProvider(PrincipalProvider):
    """Provider for a principal resolved once, e.g. per HTTP request."""

    def __init__(self, principal: Principal | None) -> None:
        self._principal = principal

    def current_principal(self) -> Principal | None:
        return self._principal


__all__ = ["Principal", "PrincipalProvider", "StaticPrincipalProvider"]
