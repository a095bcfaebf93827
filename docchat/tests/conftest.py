"""Shared fixtures for DocChat unit tests."""

from __future__ import annotations

from typing import Callable, Dict, List

import fitz
import pytest

from docchat.config import Settings
from docchat.observability import metrics_registry
from docchat.services.documents import DocumentRepository
from docchat.services.kv_store import InMemoryKeyValueStore
from docchat.services.responses import ResponseGenerator
from docchat.services.sessions import SessionRepository
from docchat.services.text_extraction import ExtractionResult


def build_pdf(pages: List[str]) -> bytes:
    """Return PDF bytes with one page per entry of ``pages``."""

    document = fitz.open()
    try:
        for text in pages:
            page = document.new_page()
            page.insert_text((72, 72), text)
        return document.tobytes()
    finally:
        document.close()


class RecordingTransport:
    """Stand-in for the OpenRouter transport that remembers each request."""

    def __init__(self, reply: str = "**Answer** from the model.") -> None:
        self.reply = reply
        self.calls: List[List[Dict[str, str]]] = []

    def __call__(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        return self.reply


def static_extractor(text: str, pages: int = 1) -> Callable[[bytes], ExtractionResult]:
    def _extract(data: bytes) -> ExtractionResult:
        return ExtractionResult(page_count=pages, text=text, engine="static")

    return _extract


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics_registry.reset()
    yield
    metrics_registry.reset()


@pytest.fixture()
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("DOCCHAT_CONTEXT_SCOPE", raising=False)
    return Settings()


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def documents(store: InMemoryKeyValueStore) -> DocumentRepository:
    return DocumentRepository(store)


@pytest.fixture()
def sessions(
    store: InMemoryKeyValueStore,
    documents: DocumentRepository,
    settings: Settings,
    transport: RecordingTransport,
) -> SessionRepository:
    responder = ResponseGenerator(settings, transport=transport)
    return SessionRepository(store, documents, responder)
