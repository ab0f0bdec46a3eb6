"""Account lookup and registration."""

from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError

from anon_inbox import constants
from anon_inbox.clients.database import User as UserORM, session_scope
from anon_inbox.errors import InvalidUsername, UsernameTaken
from anon_inbox.models.user import User
from anon_inbox.utils.ids import generate_user_id

LOG = logging.getLogger(__name__)

_USERNAME_RE = re.compile(constants.USERNAME_PATTERN)


class UserService:
    """Creates accounts and resolves them by id or username."""

    def validate_username(self, username: str) -> str:
        candidate = username.strip()
        if not _USERNAME_RE.match(candidate):
            raise InvalidUsername(
                "Username must be 2-20 characters and contain only letters, digits and underscores."
            )
        return candidate

    def register(self, username: str) -> User:
        """Create an account; new accounts accept messages."""
        candidate = self.validate_username(username)
        user = UserORM(id=generate_user_id(), username=candidate, accepting_messages=True)
        with session_scope() as db:
            if db.query(UserORM).filter(UserORM.username == candidate).first():
                raise UsernameTaken(f"Username '{candidate}' is already taken.")
            db.add(user)
            try:
                db.flush()
            except IntegrityError as exc:
                raise UsernameTaken(f"Username '{candidate}' is already taken.") from exc
            db.refresh(user)
        LOG.info("registered user %s", user.id)
        return User.model_validate(user, from_attributes=True)

    def is_username_available(self, username: str) -> bool:
        candidate = self.validate_username(username)
        return self.get_by_username(candidate) is None

    def get(self, user_id: str) -> Optional[User]:
        with session_scope() as db:
            user = db.get(UserORM, user_id)
            return User.model_validate(user, from_attributes=True) if user else None

    def get_by_username(self, username: str) -> Optional[User]:
        with session_scope() as db:
            user = db.query(UserORM).filter(UserORM.username == username).first()
            return User.model_validate(user, from_attributes=True) if user else None
