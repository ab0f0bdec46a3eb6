"""Per-owner switch controlling whether anonymous submissions are stored."""

from __future__ import annotations

import logging

from anon_inbox.clients.database import User as UserORM, session_scope
from anon_inbox.errors import UserNotFound

LOG = logging.getLogger(__name__)


class AcceptanceService:
    """Reads and writes the ``accepting_messages`` flag.

    Writes are last-write-wins and never touch stored messages.
    """

    def get_acceptance(self, owner_id: str) -> bool:
        with session_scope() as db:
            user = db.get(UserORM, owner_id)
            if not user:
                raise UserNotFound(f"User {owner_id} not found.")
            return user.accepting_messages

    def set_acceptance(self, owner_id: str, value: bool) -> bool:
        with session_scope() as db:
            user = db.get(UserORM, owner_id)
            if not user:
                raise UserNotFound(f"User {owner_id} not found.")
            user.accepting_messages = bool(value)
        LOG.info("user %s accepting_messages=%s", owner_id, bool(value))
        return bool(value)
