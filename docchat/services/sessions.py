"""Chat sessions stored in the key-value medium, one per document."""

from __future__ import annotations

import logging

from pydantic import TypeAdapter

from ..models import ChatMessage, ChatSession, MessageRole
from ..models.base import utcnow
from ..observability import metrics_registry
from ..utils.errors import SessionNotFoundError
from .documents import DocumentRepository
from .kv_store import KeyValueStore
from .responses import ResponseGenerator

LOGGER = logging.getLogger(__name__)

SESSIONS_KEY = "chat_sessions"

CONTEXT_SCOPE_DOCUMENT = "document"
CONTEXT_SCOPE_LATEST = "latest"

_SESSIONS = TypeAdapter(list[ChatSession])


class SessionRepository:
    """Own chat sessions and the message flow between user and assistant.

    ``context_scope`` selects the text handed to the response generator:
    ``"document"`` uses the chatted document's own text, ``"latest"`` uses
    whichever document was uploaded most recently.
    """

    def __init__(
        self,
        store: KeyValueStore,
        documents: DocumentRepository,
        responder: ResponseGenerator,
        *,
        context_scope: str = CONTEXT_SCOPE_DOCUMENT,
    ) -> None:
        self._store = store
        self._documents = documents
        self._responder = responder
        self._context_scope = context_scope

    def _write(self, sessions: list[ChatSession]) -> None:
        self._store.set(
            SESSIONS_KEY, _SESSIONS.dump_json(sessions, by_alias=True).decode("utf-8")
        )

    def list(self) -> list[ChatSession]:
        raw = self._store.get(SESSIONS_KEY)
        if not raw:
            return []
        return _SESSIONS.validate_json(raw)

    def get_by_id(self, session_id: str) -> ChatSession | None:
        return next((s for s in self.list() if s.id == session_id), None)

    def get_by_document_id(self, document_id: str) -> ChatSession | None:
        return next((s for s in self.list() if s.document_id == document_id), None)

    def create_session(self, document_id: str, document_name: str) -> ChatSession:
        """Return the session for ``document_id``, creating it when absent."""

        with self._store.lock:
            sessions = self.list()
            for session in sessions:
                if session.document_id == document_id:
                    return session
            now = utcnow()
            session = ChatSession(
                document_id=document_id,
                document_name=document_name,
                created_at=now,
                updated_at=now,
            )
            sessions.append(session)
            self._write(sessions)
        LOGGER.info("Created chat session %s for document %s", session.id, document_id)
        return session

    def append_message(self, document_id: str, message: ChatMessage) -> ChatSession:
        with self._store.lock:
            sessions = self.list()
            for session in sessions:
                if session.document_id == document_id:
                    break
            else:
                raise SessionNotFoundError(document_id)
            session.messages.append(message)
            session.updated_at = max(utcnow(), session.created_at)
            self._write(sessions)
        return session

    def send_user_message(self, document_id: str, content: str) -> ChatMessage:
        message = ChatMessage(
            role=MessageRole.USER, content=content, document_id=document_id
        )
        self.append_message(document_id, message)
        return message

    def _resolve_context(self, document_id: str) -> str | None:
        if self._context_scope == CONTEXT_SCOPE_LATEST:
            return self._documents.current_text()
        document = self._documents.get_by_id(document_id)
        return document.text if document is not None else None

    def request_assistant_reply(self, document_id: str, user_content: str) -> ChatMessage:
        if self.get_by_document_id(document_id) is None:
            raise SessionNotFoundError(document_id)

        context = self._resolve_context(document_id)
        reply = self._responder.generate(user_content, context)
        message = ChatMessage(
            role=MessageRole.ASSISTANT, content=reply, document_id=document_id
        )
        self.append_message(document_id, message)
        metrics_registry.record_event("replies_generated")
        return message


__all__ = [
    "CONTEXT_SCOPE_DOCUMENT",
    "CONTEXT_SCOPE_LATEST",
    "SESSIONS_KEY",
    "SessionRepository",
]
