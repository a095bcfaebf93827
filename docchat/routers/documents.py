"""Document upload, listing and deletion endpoints."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from starlette.concurrency import run_in_threadpool

from ..config import Settings, get_settings
from ..dependencies import get_document_repository, get_session_repository
from ..models import Document
from ..services.documents import DocumentRepository
from ..services.files import display_filename, read_upload, secure_filename
from ..services.sessions import SessionRepository

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


def _require_document(documents: DocumentRepository, document_id: str) -> Document:
    document = documents.get_by_id(document_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Document not found"
        )
    return document


def _content_disposition(file_name: str) -> str:
    ascii_name = secure_filename(file_name)
    return f"inline; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


@router.post("/upload", response_model=Document, status_code=status.HTTP_201_CREATED)
async def upload_file(
    *,
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    documents: DocumentRepository = Depends(get_document_repository),
    sessions: SessionRepository = Depends(get_session_repository),
) -> Document:
    """Store an uploaded PDF, extract its text and open its chat session."""

    content_type = (file.content_type or "application/pdf").lower()
    file_name = display_filename(file.filename or "")
    data = await read_upload(upload=file, settings=settings)

    # Parsing and storage block, so they run off the event loop.
    document = await run_in_threadpool(
        documents.upload, data, file_name, size=len(data), content_type=content_type
    )
    await run_in_threadpool(sessions.create_session, document.id, document.name)
    return document


@router.get("/documents", response_model=list[Document])
def list_documents(
    documents: DocumentRepository = Depends(get_document_repository),
) -> list[Document]:
    """Return every uploaded document in upload order."""

    return documents.list()


@router.get("/documents/{document_id}", response_model=Document)
def get_document(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
) -> Document:
    """Return stored metadata and text for a document."""

    return _require_document(documents, document_id)


@router.get("/documents/{document_id}/file")
def get_document_file(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
) -> Response:
    """Return the original uploaded bytes for display."""

    document = _require_document(documents, document_id)
    try:
        data = documents.get_file(document_id)
    except ValueError as exc:
        LOGGER.error("Stored file for %s is corrupt: %s", document_id, exc)
        data = None
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Document contents missing"
        )
    return Response(
        content=data,
        media_type=document.content_type,
        headers={"Content-Disposition": _content_disposition(document.file_name)},
    )


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_document(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
) -> Response:
    """Delete a document and its stored file; its chat session is kept."""

    if not documents.delete(document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Document not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
