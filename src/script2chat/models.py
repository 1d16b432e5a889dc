"""Data models for users, conversations and messages parsed from a script."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    id: UUID
    name: str
    password: str
    created_at: datetime = Field(default_factory=_now)


class Conversation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    title: str
    created_at: datetime = Field(default_factory=_now)


class Message(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    conversation_id: UUID
    author_id: UUID
    content: str
    created_at: datetime = Field(default_factory=_now)


class ParseSummary(BaseModel):
    """Counts collected over one parse run."""

    lines: int = 0
    users: int = 0
    conversations: int = 0
    messages: int = 0
