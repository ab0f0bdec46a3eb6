"""User and acceptance models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Account record as seen by the inbox core."""

    id: str
    username: str
    accepting_messages: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Identity(BaseModel):
    """What the identity provider hands to the API for an authenticated caller."""

    id: str
    username: str


class UserCreateRequest(BaseModel):
    username: str


class PublicProfile(BaseModel):
    username: str
    isAcceptingMessage: bool


class AcceptanceStatus(BaseModel):
    isAcceptingMessage: bool


class AcceptanceUpdateRequest(BaseModel):
    acceptMessages: bool


class AcceptanceUpdateResponse(BaseModel):
    message: str
    isAcceptingMessage: bool
