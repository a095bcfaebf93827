"""Tests for the document catalog."""

from __future__ import annotations

import json

import pytest

from docchat.models import DocumentStatus
from docchat.observability import metrics_registry
from docchat.services.documents import (
    CURRENT_TEXT_KEY,
    DOCUMENTS_KEY,
    PARSE_FAILED_TEMPLATE,
    READ_FAILED_TEMPLATE,
    DocumentRepository,
    blob_key,
    fallback_text,
)
from docchat.services.kv_store import InMemoryKeyValueStore
from docchat.utils.errors import DocumentReadError, StorageError

from .conftest import build_pdf, static_extractor


def _failing_extractor(exc: Exception):
    def _extract(data: bytes):
        raise exc

    return _extract


def test_upload_stores_document_blob_and_current_text(store) -> None:
    repo = DocumentRepository(store, extractor=static_extractor("Quarterly report", 3))

    document = repo.upload(b"%PDF-1.4 fake", "report.pdf")

    assert document.status is DocumentStatus.READY
    assert document.pages == 3
    assert document.text == "Quarterly report"
    assert document.name == document.file_name == "report.pdf"
    assert document.size == len(b"%PDF-1.4 fake")
    assert [doc.id for doc in repo.list()] == [document.id]
    assert repo.get_by_id(document.id) == document
    assert repo.get_file(document.id) == b"%PDF-1.4 fake"
    assert store.get(blob_key(document.id)).startswith("data:application/pdf;base64,")
    assert repo.current_text() == "Quarterly report"


def test_catalog_is_stored_with_camel_case_keys(store) -> None:
    repo = DocumentRepository(store, extractor=static_extractor("text"))
    repo.upload(b"data", "a.pdf")

    stored = json.loads(store.get(DOCUMENTS_KEY))
    assert set(stored[0]) >= {"id", "name", "fileName", "uploadedAt", "size", "pages", "text"}


def test_each_upload_gets_a_unique_id_in_insertion_order(store) -> None:
    repo = DocumentRepository(store, extractor=static_extractor("text"))

    uploaded = [repo.upload(b"data", f"doc-{index}.pdf") for index in range(5)]

    listed = repo.list()
    assert [doc.id for doc in listed] == [doc.id for doc in uploaded]
    assert len({doc.id for doc in listed}) == 5


def test_parse_failure_degrades_document(store) -> None:
    repo = DocumentRepository(store, extractor=_failing_extractor(RuntimeError("bad xref")))

    document = repo.upload(b"x" * 2048, "broken.pdf")

    assert document.status is DocumentStatus.DEGRADED
    assert document.pages == 0
    assert document.text == (
        "Document: broken.pdf\nSize: 2.00 KB\nType: application/pdf\n\n"
        "Text extraction failed. Please try a different PDF or check file format."
    )
    assert repo.get_by_id(document.id) == document
    assert store.get(CURRENT_TEXT_KEY) == document.text
    assert metrics_registry.snapshot()["events"]["extractions_degraded"] == 1


def test_read_failure_uses_read_template(store) -> None:
    repo = DocumentRepository(
        store, extractor=_failing_extractor(DocumentReadError("stream closed"))
    )

    document = repo.upload(b"abc", "unreadable.pdf", size=512)

    assert document.pages == 0
    assert document.text == fallback_text(
        READ_FAILED_TEMPLATE,
        name="unreadable.pdf",
        size=512,
        content_type="application/pdf",
    )
    assert "Unable to read file content" in document.text


def test_real_extractor_degrades_invalid_and_empty_files(store) -> None:
    repo = DocumentRepository(store)

    garbage = repo.upload(b"this is not a pdf", "garbage.pdf")
    empty = repo.upload(b"", "empty.pdf")

    assert garbage.text == fallback_text(
        PARSE_FAILED_TEMPLATE, name="garbage.pdf", size=17, content_type="application/pdf"
    )
    assert empty.text == fallback_text(
        READ_FAILED_TEMPLATE, name="empty.pdf", size=0, content_type="application/pdf"
    )
    assert {doc.id for doc in repo.list()} == {garbage.id, empty.id}


def test_two_page_pdf_is_extracted(store) -> None:
    repo = DocumentRepository(store)

    document = repo.upload(build_pdf(["Hello World", "Second page"]), "hello.pdf")

    assert document.status is DocumentStatus.READY
    assert document.pages == 2
    assert "Hello World" in document.text
    assert "Second page" in document.text


def test_blob_quota_failure_is_fatal_and_leaves_no_record() -> None:
    store = InMemoryKeyValueStore(quota_bytes=64)
    repo = DocumentRepository(store, extractor=static_extractor("text"))

    with pytest.raises(StorageError):
        repo.upload(b"x" * 1024, "big.pdf")

    assert repo.list() == []


class _CatalogWriteFails(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        if key == DOCUMENTS_KEY:
            raise StorageError("quota_exceeded", "catalog full", key=key)
        super().set(key, value)


def test_catalog_write_failure_removes_blob() -> None:
    store = _CatalogWriteFails()
    repo = DocumentRepository(store, extractor=static_extractor("text"))

    with pytest.raises(StorageError):
        repo.upload(b"data", "doc.pdf")

    assert not any(key.startswith("pdf_") for key in store.keys())


def test_catalog_write_failure_keeps_previous_current_text() -> None:
    store = _CatalogWriteFails()
    store.set(CURRENT_TEXT_KEY, "first text")
    repo = DocumentRepository(store, extractor=static_extractor("rejected text"))

    with pytest.raises(StorageError):
        repo.upload(b"data", "rejected.pdf")

    assert repo.current_text() == "first text"
    assert repo.list() == []


def test_delete_removes_document_and_blob(store) -> None:
    repo = DocumentRepository(store, extractor=static_extractor("text"))
    keep = repo.upload(b"keep", "keep.pdf")
    drop = repo.upload(b"drop", "drop.pdf")

    assert repo.delete(drop.id) is True

    assert [doc.id for doc in repo.list()] == [keep.id]
    assert repo.get_by_id(drop.id) is None
    assert store.get(blob_key(drop.id)) is None
    assert repo.get_file(drop.id) is None
    assert repo.delete(drop.id) is False
    assert repo.delete("missing") is False


def test_get_by_id_missing_returns_none(documents) -> None:
    assert documents.get_by_id("nope") is None
    assert documents.list() == []
