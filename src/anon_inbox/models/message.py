"""Inbox message models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from anon_inbox.models.enums import MessagePurpose


class Message(BaseModel):
    """Anonymous message stored in an owner's inbox."""

    id: str
    owner_id: str
    content: str
    purpose: MessagePurpose
    created_at: datetime

    class Config:
        from_attributes = True


class MessageSubmitRequest(BaseModel):
    # content and purpose are checked by InboxService.
    targetUsername: str
    content: Any = None
    purpose: Any = None


class SubmissionResult(BaseModel):
    """Outcome of an anonymous submission.

    ``accepted=False`` means the owner has switched submissions off; it is a
    normal outcome rather than an error.
    """

    accepted: bool
    message_id: Optional[str] = None


class MessageListResponse(BaseModel):
    messages: List[Message] = Field(default_factory=list)


class ActionResponse(BaseModel):
    success: bool
    message: str
