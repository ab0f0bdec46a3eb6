"""Category projections over an already fetched message sequence."""

from __future__ import annotations

from typing import Dict, List, Sequence

from anon_inbox.errors import InvalidPurpose
from anon_inbox.models.enums import MessageFilter
from anon_inbox.models.message import Message


def parse_filter(category: str | MessageFilter | None) -> MessageFilter:
    if category is None:
        return MessageFilter.ALL
    if isinstance(category, MessageFilter):
        return category
    try:
        return MessageFilter(str(category).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(f.value for f in MessageFilter)
        raise InvalidPurpose(f"Filter must be one of: {allowed}.") from exc


def filter_messages(messages: Sequence[Message], category: str | MessageFilter | None = None) -> List[Message]:
    """Return the messages matching ``category`` in their original order."""
    selected = parse_filter(category)
    if selected is MessageFilter.ALL:
        return list(messages)
    return [message for message in messages if message.purpose.value == selected.value]


def count_by_purpose(messages: Sequence[Message]) -> Dict[str, int]:
    counts = {option.value: 0 for option in MessageFilter}
    for message in messages:
        counts[message.purpose.value] += 1
    counts[MessageFilter.ALL.value] = len(messages)
    return counts
