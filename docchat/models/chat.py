"""Chat session and message models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from .base import CamelModel, new_id, utcnow


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(CamelModel):
    """A single entry in a chat session; assistant content is markdown."""

    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    document_id: str


class ChatSession(CamelModel):
    """The ordered conversation attached to exactly one document."""

    id: str = Field(default_factory=new_id)
    document_id: str
    document_name: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    messages: list[ChatMessage] = Field(default_factory=list)
