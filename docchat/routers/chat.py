"""Chat session and messaging endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field

from ..dependencies import get_document_repository, get_session_repository
from ..models import ChatMessage, ChatSession
from ..models.base import CamelModel
from ..services.documents import DocumentRepository
from ..services.sessions import SessionRepository

router = APIRouter(prefix="/api", tags=["chat"])


class MessageRequest(CamelModel):
    content: str = Field(min_length=1)


class ExchangeResponse(CamelModel):
    """The user message and the assistant reply it produced."""

    user: ChatMessage
    assistant: ChatMessage


def _session_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Chat session not found"
    )


@router.post("/documents/{document_id}/session", response_model=ChatSession)
def open_session(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
    sessions: SessionRepository = Depends(get_session_repository),
) -> ChatSession:
    """Return the document's chat session, creating it on first visit."""

    document = documents.get_by_id(document_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Document not found"
        )
    return sessions.create_session(document.id, document.name)


@router.get("/documents/{document_id}/session", response_model=ChatSession)
def get_document_session(
    document_id: str,
    sessions: SessionRepository = Depends(get_session_repository),
) -> ChatSession:
    session = sessions.get_by_document_id(document_id)
    if session is None:
        raise _session_not_found()
    return session


@router.get("/sessions", response_model=list[ChatSession])
def list_sessions(
    sessions: SessionRepository = Depends(get_session_repository),
) -> list[ChatSession]:
    return sessions.list()


@router.get("/sessions/{session_id}", response_model=ChatSession)
def get_session(
    session_id: str,
    sessions: SessionRepository = Depends(get_session_repository),
) -> ChatSession:
    session = sessions.get_by_id(session_id)
    if session is None:
        raise _session_not_found()
    return session


@router.post(
    "/documents/{document_id}/messages",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
def post_message(
    document_id: str,
    payload: MessageRequest,
    sessions: SessionRepository = Depends(get_session_repository),
) -> ChatMessage:
    """Append a user message to the document's session."""

    return sessions.send_user_message(document_id, payload.content)


@router.post(
    "/documents/{document_id}/reply",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
def post_reply(
    document_id: str,
    payload: MessageRequest,
    sessions: SessionRepository = Depends(get_session_repository),
) -> ChatMessage:
    """Generate and store the assistant's answer to ``payload.content``."""

    return sessions.request_assistant_reply(document_id, payload.content)


@router.post(
    "/documents/{document_id}/ask",
    response_model=ExchangeResponse,
    status_code=status.HTTP_201_CREATED,
)
def ask(
    document_id: str,
    payload: MessageRequest,
    sessions: SessionRepository = Depends(get_session_repository),
) -> ExchangeResponse:
    """Send a user message and return it together with the assistant reply."""

    user_message = sessions.send_user_message(document_id, payload.content)
    reply = sessions.request_assistant_reply(document_id, payload.content)
    return ExchangeResponse(user=user_message, assistant=reply)


__all__ = ["router"]
