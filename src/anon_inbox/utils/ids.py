"""Identifier helpers."""

from __future__ import annotations

import uuid


def generate_user_id() -> str:
    """Return a random user identifier."""
    return uuid.uuid4().hex


def generate_message_id() -> str:
    """Return a random message identifier, unique across every inbox."""
    return uuid.uuid4().hex
