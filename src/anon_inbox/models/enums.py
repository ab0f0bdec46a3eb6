"""Shared enums for Anon Inbox models."""

from __future__ import annotations

from enum import Enum


class MessagePurpose(str, Enum):
    FEEDBACK = "feedback"
    SUGGESTION = "suggestion"
    APPRECIATION = "appreciation"


class MessageFilter(str, Enum):
    ALL = "all"
    FEEDBACK = "feedback"
    SUGGESTION = "suggestion"
    APPRECIATION = "appreciation"
