"""Document catalog stored in the key-value medium."""

from __future__ import annotations

import base64
import binascii
import logging

from pydantic import TypeAdapter

from ..models import Document, DocumentStatus
from ..observability import metrics_registry
from ..utils.errors import DocumentReadError
from .kv_store import KeyValueStore
from .text_extraction import Extractor, extract_text

LOGGER = logging.getLogger(__name__)

DOCUMENTS_KEY = "documents"
CURRENT_TEXT_KEY = "current_document_text"
BLOB_KEY_PREFIX = "pdf_"

READ_FAILED_TEMPLATE = (
    "Document: {name}\nSize: {size_kb:.2f} KB\nType: {content_type}\n\n"
    "Unable to read file content. Please try again or use a different file."
)
PARSE_FAILED_TEMPLATE = (
    "Document: {name}\nSize: {size_kb:.2f} KB\nType: {content_type}\n\n"
    "Text extraction failed. Please try a different PDF or check file format."
)

_DOCUMENTS = TypeAdapter(list[Document])


def blob_key(document_id: str) -> str:
    return f"{BLOB_KEY_PREFIX}{document_id}"


def encode_data_url(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_data_url(value: str) -> bytes:
    """Return the payload of a base64 ``data:`` URL."""

    header, sep, payload = value.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Stored file is not a base64 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Stored file has invalid base64 content") from exc


def fallback_text(template: str, *, name: str, size: int, content_type: str) -> str:
    return template.format(name=name, size_kb=size / 1024, content_type=content_type)


class DocumentRepository:
    """Create, list, look up and delete uploaded documents."""

    def __init__(self, store: KeyValueStore, extractor: Extractor = extract_text) -> None:
        self._store = store
        self._extractor = extractor

    def _write(self, documents: list[Document]) -> None:
        self._store.set(
            DOCUMENTS_KEY, _DOCUMENTS.dump_json(documents, by_alias=True).decode("utf-8")
        )

    def list(self) -> list[Document]:
        raw = self._store.get(DOCUMENTS_KEY)
        if not raw:
            return []
        return _DOCUMENTS.validate_json(raw)

    def get_by_id(self, document_id: str) -> Document | None:
        for document in self.list():
            if document.id == document_id:
                return document
        return None

    def upload(
        self,
        data: bytes,
        file_name: str,
        size: int | None = None,
        content_type: str = "application/pdf",
    ) -> Document:
        """Persist ``data``, extract its text and add it to the catalog.

        Extraction failures degrade the document to a fallback text; only
        :class:`~docchat.utils.errors.StorageError` escapes.
        """

        document = Document(
            name=file_name,
            file_name=file_name,
            size=len(data) if size is None else size,
            content_type=content_type,
        )
        LOGGER.info("Uploading %s as %s (%d bytes)", file_name, document.id, document.size)

        self._store.set(blob_key(document.id), encode_data_url(data, content_type))

        try:
            result = self._extractor(data)
        except DocumentReadError as exc:
            LOGGER.warning("Could not read %s: %s", file_name, exc)
            document.pages = 0
            document.text = fallback_text(
                READ_FAILED_TEMPLATE,
                name=file_name,
                size=document.size,
                content_type=content_type,
            )
            document.status = DocumentStatus.DEGRADED
        except Exception as exc:  # noqa: BLE001 - any parser error degrades the document
            LOGGER.warning("Text extraction failed for %s: %s", file_name, exc)
            document.pages = 0
            document.text = fallback_text(
                PARSE_FAILED_TEMPLATE,
                name=file_name,
                size=document.size,
                content_type=content_type,
            )
            document.status = DocumentStatus.DEGRADED
        else:
            document.pages = result.page_count
            document.text = result.text
            document.status = DocumentStatus.READY

        with self._store.lock:
            try:
                documents = self.list()
                documents.append(document)
                self._write(documents)
            except Exception:
                self._store.remove(blob_key(document.id))
                raise
            # Only a catalogued document may become the latest context.
            self._store.set(CURRENT_TEXT_KEY, document.text or "")

        metrics_registry.record_event("documents_uploaded")
        if document.status is DocumentStatus.DEGRADED:
            metrics_registry.record_event("extractions_degraded")
        return document

    def delete(self, document_id: str) -> bool:
        """Remove a document and its stored file; sessions are left in place."""

        with self._store.lock:
            documents = self.list()
            remaining = [doc for doc in documents if doc.id != document_id]
            if len(remaining) == len(documents):
                return False
            self._write(remaining)
        self._store.remove(blob_key(document_id))
        LOGGER.info("Deleted document %s", document_id)
        return True

    def get_file(self, document_id: str) -> bytes | None:
        raw = self._store.get(blob_key(document_id))
        if raw is None:
            return None
        return decode_data_url(raw)

    def current_text(self) -> str | None:
        return self._store.get(CURRENT_TEXT_KEY)


__all__ = [
    "BLOB_KEY_PREFIX",
    "CURRENT_TEXT_KEY",
    "DOCUMENTS_KEY",
    "DocumentRepository",
    "PARSE_FAILED_TEMPLATE",
    "READ_FAILED_TEMPLATE",
    "blob_key",
    "decode_data_url",
    "encode_data_url",
    "fallback_text",
]
