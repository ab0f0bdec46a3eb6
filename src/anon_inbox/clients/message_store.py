"""Persistence adapter for inbox messages."""

from __future__ import annotations

from datetime import timezone
from typing import List, Optional

from anon_inbox.clients.database import Message as MessageORM, session_scope
from anon_inbox.models.message import Message


def _to_model(record: MessageORM) -> Message:
    message = Message.model_validate(record, from_attributes=True)
    # SQLite hands back naive datetimes; rows are always written in UTC.
    if message.created_at.tzinfo is None:
        message = message.model_copy(update={"created_at": message.created_at.replace(tzinfo=timezone.utc)})
    return message


class MessageStore:
    """Appends, lists and deletes messages keyed by their owner."""

    def append(self, message: Message) -> Message:
        created_at = message.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc)
        record = MessageORM(
            id=message.id,
            owner_id=message.owner_id,
            content=message.content,
            purpose=message.purpose,
            created_at=created_at,
        )
        with session_scope() as db:
            db.add(record)
            db.flush()
        return message

    def list_by_owner(self, owner_id: str) -> List[Message]:
        """Return the owner's messages newest-first; ties broken by id."""
        with session_scope() as db:
            records = (
                db.query(MessageORM)
                .filter(MessageORM.owner_id == owner_id)
                .order_by(MessageORM.created_at.desc(), MessageORM.id.asc())
                .all()
            )
            return [_to_model(obj) for obj in records]

    def get(self, message_id: str) -> Optional[Message]:
        with session_scope() as db:
            record = db.get(MessageORM, message_id)
            return _to_model(record) if record else None

    def delete(self, message_id: str, owner_id: str) -> bool:
        """Remove a message if it still exists and belongs to ``owner_id``."""
        with session_scope() as db:
            removed = (
                db.query(MessageORM)
                .filter(MessageORM.id == message_id, MessageORM.owner_id == owner_id)
                .delete(synchronize_session=False)
            )
        return removed == 1
