"""Failure kinds surfaced by the inbox core."""

from __future__ import annotations


class InboxError(RuntimeError):
    """Base class for typed inbox failures.

    ``kind`` is the machine-readable tag returned to API callers next to the
    human readable ``message``.
    """

    kind = "inbox_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UserNotFound(InboxError):
    kind = "user_not_found"


class InvalidContent(InboxError):
    kind = "invalid_content"


class InvalidPurpose(InboxError):
    kind = "invalid_purpose"


class InvalidUsername(InboxError):
    kind = "invalid_username"


class UsernameTaken(InboxError):
    kind = "username_taken"


class Unauthorized(InboxError):
    kind = "unauthorized"


class Forbidden(InboxError):
    kind = "forbidden"


class MessageNotFound(InboxError):
    kind = "not_found"


class StoreUnavailable(InboxError):
    """Persistence failed; the mutation was rolled back."""

    kind = "store_unavailable"
