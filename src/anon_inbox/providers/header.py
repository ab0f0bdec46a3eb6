"""Identity provider trusting an upstream-authenticated user id header."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from anon_inbox import constants
from anon_inbox.models.user import Identity
from anon_inbox.providers.base import IdentityProvider
from anon_inbox.services.user_service import UserService


class HeaderIdentityProvider(IdentityProvider):
    """Reads the user id from ``X-User-Id`` and resolves it to a registered account.

    Meant to sit behind a gateway that performs the actual authentication.
    """

    def __init__(self, users: UserService, header: str = constants.USER_ID_HEADER) -> None:
        self.users = users
        self.header = header

    def current_user(self, request: Request) -> Optional[Identity]:
        user_id = request.headers.get(self.header)
        if not user_id:
            return None
        user = self.users.get(user_id.strip())
        if user is None:
            return None
        return Identity(id=user.id, username=user.username)
