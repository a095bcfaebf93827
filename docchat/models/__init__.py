"""Data models for the DocChat service."""

from .chat import ChatMessage, ChatSession, MessageRole
from .document import Document, DocumentStatus
from .kv_entry import KeyValueEntry

__all__ = [
    "ChatMessage",
    "ChatSession",
    "Document",
    "DocumentStatus",
    "KeyValueEntry",
    "MessageRole",
]
