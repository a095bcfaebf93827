"""Routes that expose operational observability data."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from docchat import __version__
from ..dependencies import get_store
from ..observability import metrics_registry
from ..services.kv_store import KeyValueStore, store_reachable

router = APIRouter(prefix="/api", tags=["observability"])


@router.get("/metrics")
def read_metrics() -> dict[str, object]:
    """Return the current request metrics snapshot."""

    return metrics_registry.snapshot()


@router.get("/status")
def read_status(store: KeyValueStore = Depends(get_store)) -> dict[str, object]:
    """Return an aggregated operational status payload."""

    return {
        "app": {"version": __version__},
        "store": {"ok": store_reachable(store), "backend": type(store).__name__},
        "metrics": metrics_registry.snapshot(),
    }


__all__ = ["router"]
