"""Identity provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Request

from anon_inbox.models.user import Identity


class IdentityProvider(ABC):
    """Resolves the authenticated caller of a request.

    Session and credential issuance live outside this package; implementations
    only translate an incoming request into a stable ``Identity``.
    """

    @abstractmethod
    def current_user(self, request: Request) -> Optional[Identity]:
        """Return the caller's identity, or None for anonymous requests."""
