"""Liveness endpoint reporting whether the key-value store answers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import get_store
from ..models.base import CamelModel
from ..services.kv_store import KeyValueStore, store_reachable

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(CamelModel):
    ok: bool
    store: str


@router.get("/health", response_model=HealthResponse, summary="Service health status")
def read_health(
    response: Response, store: KeyValueStore = Depends(get_store)
) -> HealthResponse:
    """Report ``ok`` only while documents and sessions can be read."""

    ok = store_reachable(store)
    if not ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(ok=ok, store=type(store).__name__)


__all__ = ["router"]
