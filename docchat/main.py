"""DocChat service entrypoint."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .dependencies import get_store
from .middleware import RequestIdMiddleware
from .observability import RequestMetricsMiddleware
from .routers import chat, documents, health, observability
from .utils.errors import SessionNotFoundError, StorageError
from .utils.logging import configure_logging

configure_logging()

settings = get_settings()
logger = logging.getLogger("uvicorn.error")

cors_allow_origins = list(settings.cors_allow_origins)
allow_credentials = True
if "*" in cors_allow_origins:
    cors_allow_origins = ["*"]
    allow_credentials = False
if not cors_allow_origins:
    cors_allow_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]

_cors_origin_pattern = (
    re.compile(settings.cors_allow_origin_regex)
    if settings.cors_allow_origin_regex
    else None
)


def _mask_api_key(value: str | None) -> str:
    """Return a masked representation of the OpenRouter API key."""

    if not value or not value.strip():
        return "<missing>"

    stripped = value.strip()
    if len(stripped) <= 8:
        middle = "…" * max(len(stripped) - 2, 1)
        return f"{stripped[0]}{middle}{stripped[-1]}"

    return f"{stripped[:4]}…{stripped[-4:]}"


def _announce_openrouter_api_key(value: str | None) -> None:
    if value and value.strip():
        logger.info("[DocChat] OpenRouter API key loaded: %s", _mask_api_key(value))
    else:
        logger.info(
            "[DocChat] OpenRouter API key not found; assistant replies will "
            "fall back to an apology message."
        )


_announce_openrouter_api_key(settings.openrouter_api_key)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the key-value store before serving requests."""

    store = get_store()
    logger.info("[DocChat] Key-value store ready: %s", type(store).__name__)
    yield


app = FastAPI(title="DocChat", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=settings.cors_allow_origin_regex,
)
app.add_middleware(RequestMetricsMiddleware)
app.add_middleware(RequestIdMiddleware)


ROUTERS: Iterable = (
    documents.router,
    chat.router,
    health.router,
    observability.router,
)

for router in ROUTERS:
    app.include_router(router)


def _cors_headers(request: Request) -> dict[str, str]:
    origin = request.headers.get("origin")
    headers: dict[str, str] = {}
    if not origin:
        return headers

    allowed_origin: str | None = None
    if cors_allow_origins == ["*"]:
        allowed_origin = "*"
    elif origin in cors_allow_origins:
        allowed_origin = origin
    elif _cors_origin_pattern and _cors_origin_pattern.fullmatch(origin):
        allowed_origin = origin

    if allowed_origin:
        headers["Access-Control-Allow-Origin"] = allowed_origin
        headers.setdefault("Vary", "Origin")
        if allow_credentials and allowed_origin != "*":
            headers["Access-Control-Allow-Credentials"] = "true"
    return headers


@app.exception_handler(SessionNotFoundError)
async def handle_session_not_found(
    request: Request, exc: SessionNotFoundError
) -> JSONResponse:
    logger.warning("Chat session missing for document %s", exc.document_id)
    return JSONResponse(
        status_code=404,
        content={"detail": "Chat session not found", "code": exc.code},
    )


@app.exception_handler(StorageError)
async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure (%s) on key %s: %s", exc.code, exc.key, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage unavailable", "code": exc.code},
        headers=_cors_headers(request) or None,
    )


@app.exception_handler(Exception)
async def handle_unexpected_exception(
    request: Request, exc: Exception
) -> JSONResponse:
    """Ensure unexpected exceptions return a JSON payload."""

    logger.exception(
        "Unhandled exception while processing %s %s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
        headers=_cors_headers(request) or None,
    )


__all__ = ["app"]
