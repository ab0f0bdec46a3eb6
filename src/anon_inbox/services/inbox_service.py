"""Anonymous message intake and owner inbox management."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from anon_inbox import constants
from anon_inbox.clients.message_store import MessageStore
from anon_inbox.errors import Forbidden, InvalidContent, InvalidPurpose, MessageNotFound, UserNotFound
from anon_inbox.models.enums import MessagePurpose
from anon_inbox.models.message import Message, SubmissionResult
from anon_inbox.services.acceptance_service import AcceptanceService
from anon_inbox.services.user_service import UserService
from anon_inbox.utils.ids import generate_message_id

LOG = logging.getLogger(__name__)


def parse_purpose(purpose: Any) -> MessagePurpose:
    """Return the purpose enum, rejecting anything but the three exact category values."""
    if isinstance(purpose, MessagePurpose):
        return purpose
    try:
        if not isinstance(purpose, str):
            raise ValueError(purpose)
        return MessagePurpose(purpose)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in MessagePurpose)
        raise InvalidPurpose(f"Purpose must be one of: {allowed}.") from exc


def validate_content(content: Any) -> str:
    """Check content without altering it; the caller stores exactly what was sent."""
    if not isinstance(content, str) or not content.strip():
        raise InvalidContent("Message content must not be empty.")
    if len(content) > constants.MAX_CONTENT_LENGTH:
        raise InvalidContent(
            f"Message content must be at most {constants.MAX_CONTENT_LENGTH} characters."
        )
    return content


class InboxService:
    """Accepts anonymous submissions and serves owners their inbox."""

    def __init__(
        self,
        users: UserService,
        acceptance: AcceptanceService,
        store: Optional[MessageStore] = None,
    ) -> None:
        self.users = users
        self.acceptance = acceptance
        self.store = store or MessageStore()

    def submit(self, target_username: str, content: Any, purpose: Any) -> SubmissionResult:
        """Store a message for ``target_username`` if they accept submissions.

        Nothing about the submitter is recorded.
        """
        text = validate_content(content)
        category = parse_purpose(purpose)

        owner = self.users.get_by_username(target_username)
        if owner is None:
            raise UserNotFound(f"User '{target_username}' not found.")

        if not self.acceptance.get_acceptance(owner.id):
            LOG.info("submission to %s rejected: not accepting messages", owner.id)
            return SubmissionResult(accepted=False)

        message = Message(
            id=generate_message_id(),
            owner_id=owner.id,
            content=text,
            purpose=category,
            created_at=datetime.now(timezone.utc),
        )
        self.store.append(message)
        LOG.info("stored %s message %s for %s", category.value, message.id, owner.id)
        return SubmissionResult(accepted=True, message_id=message.id)

    def list_messages(self, caller_id: str, owner_id: str) -> List[Message]:
        if caller_id != owner_id:
            raise Forbidden("You can only read your own messages.")
        if self.users.get(owner_id) is None:
            raise UserNotFound(f"User {owner_id} not found.")
        return self.store.list_by_owner(owner_id)

    def delete_message(self, caller_id: str, message_id: str) -> None:
        message = self.store.get(message_id)
        if message is None:
            raise MessageNotFound(f"Message {message_id} not found.")
        if message.owner_id != caller_id:
            raise Forbidden("You can only delete your own messages.")
        # A concurrent delete may have won since the lookup above.
        if not self.store.delete(message_id, owner_id=caller_id):
            raise MessageNotFound(f"Message {message_id} not found.")
        LOG.info("deleted message %s for %s", message_id, caller_id)
