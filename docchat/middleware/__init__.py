"""ASGI middleware utilities for the DocChat service."""

from .request_context import REQUEST_ID_HEADER, RequestIdMiddleware, get_request_id

__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "get_request_id"]
