"""Request and domain-event metrics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


@dataclass
class RouteStats:
    count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0


class MetricsRegistry:
    """In-memory counters for HTTP traffic and chat/document events."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._requests_total = 0
        self._status_families: Counter[str] = Counter()
        self._routes: Dict[str, RouteStats] = {}
        self._events: Counter[str] = Counter()

    def reset(self) -> None:
        with self._lock:
            self._requests_total = 0
            self._status_families = Counter()
            self._routes = {}
            self._events = Counter()

    def record_event(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._events[name] += amount

    def request_finished(
        self, route_key: str, status_code: int, duration_seconds: float
    ) -> None:
        duration_ms = max(duration_seconds * 1000.0, 0.0)
        with self._lock:
            self._requests_total += 1
            self._status_families[f"{status_code // 100}xx"] += 1
            stats = self._routes.setdefault(route_key, RouteStats())
            stats.count += 1
            stats.total_duration_ms += duration_ms
            stats.max_duration_ms = max(stats.max_duration_ms, duration_ms)

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            routes = {
                key: {
                    "count": stats.count,
                    "avg_duration_ms": stats.total_duration_ms / (stats.count or 1),
                    "max_duration_ms": stats.max_duration_ms,
                }
                for key, stats in self._routes.items()
            }
            return {
                "requests_total": self._requests_total,
                "status_codes": dict(self._status_families),
                "routes": routes,
                "events": dict(self._events),
            }


def _route_key(request: Request) -> str:
    # Group by route template so per-document paths share one entry.
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method.upper()} {path}"


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records request metrics."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        registry: MetricsRegistry | None = None,
    ) -> None:
        super().__init__(app)
        self._registry = registry or metrics_registry

    async def dispatch(self, request: Request, call_next):
        start = perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._registry.request_finished(
                _route_key(request), 500, perf_counter() - start
            )
            raise
        self._registry.request_finished(
            _route_key(request), response.status_code, perf_counter() - start
        )
        return response


metrics_registry = MetricsRegistry()

__all__ = [
    "MetricsRegistry",
    "RequestMetricsMiddleware",
    "metrics_registry",
]
