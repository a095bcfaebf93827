"""FastAPI dependency providers wiring the store into the repositories."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends

from .config import Settings, get_settings
from .database import get_engine, init_db
from .services.documents import DocumentRepository
from .services.kv_store import InMemoryKeyValueStore, KeyValueStore, SQLKeyValueStore
from .services.responses import ResponseGenerator
from .services.sessions import SessionRepository
from .services.text_extraction import make_extractor

LOGGER = logging.getLogger(__name__)


@lru_cache()
def get_store() -> KeyValueStore:
    """Return the process-wide key-value medium selected by ``DOCCHAT_STORE``."""

    settings = get_settings()
    if settings.store_backend == "memory":
        LOGGER.info("Using in-memory key-value store")
        return InMemoryKeyValueStore()
    engine = get_engine()
    init_db(engine)
    return SQLKeyValueStore(engine)


def reset_store_cache() -> None:
    get_store.cache_clear()


def get_document_repository(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DocumentRepository:
    return DocumentRepository(store, extractor=make_extractor(settings.parser_engine))


def get_response_generator(
    settings: Settings = Depends(get_settings),
) -> ResponseGenerator:
    return ResponseGenerator(settings)


def get_session_repository(
    store: KeyValueStore = Depends(get_store),
    documents: DocumentRepository = Depends(get_document_repository),
    responder: ResponseGenerator = Depends(get_response_generator),
    settings: Settings = Depends(get_settings),
) -> SessionRepository:
    return SessionRepository(
        store, documents, responder, context_scope=settings.context_scope
    )


__all__ = [
    "get_document_repository",
    "get_response_generator",
    "get_session_repository",
    "get_store",
    "reset_store_cache",
]
