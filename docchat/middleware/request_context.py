"""Per-request identifiers shared by log records and response headers."""

from __future__ import annotations

import contextvars
import logging
import re
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

LOGGER = logging.getLogger("docchat.access")

REQUEST_ID_HEADER = "X-Request-ID"

_current_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "docchat_request_id", default=None
)

# Client supplied ids are echoed only when they are short and log-safe.
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def get_request_id(default: str | None = None) -> str | None:
    """Return the id of the request being served, or ``default`` outside one."""

    current = _current_request_id.get()
    return default if current is None else current


def _normalise_request_id(value: str | None) -> str:
    candidate = (value or "").strip()
    if _ACCEPTED_ID.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of a request and log its outcome.

    The id is read from (or generated for) ``header_name``, stored on
    ``request.state.request_id`` and echoed on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _normalise_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            LOGGER.info(
                "%s %s -> %d in %.1f ms",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        finally:
            _current_request_id.reset(token)
        response.headers[self.header_name] = request_id
        return response


__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "get_request_id"]
