from __future__ import annotations

from typing import Any, Dict


class StorageError(Exception):
    """Raised when the key-value medium cannot read or write a value."""

    def __init__(
        self,
        code: str,
        message: str,
        key: str | None = None,
        extra: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.key = key
        self.extra = extra or {}


class SessionNotFoundError(LookupError):
    """Raised when a message targets a document that has no chat session."""

    def __init__(self, document_id: str, extra: Dict[str, Any] | None = None) -> None:
        super().__init__(f"No chat session for document {document_id!r}")
        self.code = "session_not_found"
        self.document_id = document_id
        self.extra = extra or {}


class DocumentReadError(Exception):
    """Raised when the raw bytes of an upload cannot be read at all."""

    def __init__(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = "document_unreadable"
        self.extra = extra or {}


__all__ = ["DocumentReadError", "SessionNotFoundError", "StorageError"]
