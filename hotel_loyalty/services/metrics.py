# hotel_loyalty/services/metrics.py
"""
Prometheus-метрики: процесс/платформа + гистограмма длительности запросов.
Реестр свой на каждое приложение, чтобы тесты не конфликтовали по именам.
"""
from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

METRICS_PATH = "/metrics"
BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5)


class Metrics:
    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)
        self.http_request_duration = Histogram(
            "loyalty_api_http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            labelnames=("method", "route", "status_code"),
            buckets=BUCKETS,
            registry=self.registry,
        )

    def observe(self, method: str, route: str, status_code: int, seconds: float) -> None:
        self.http_request_duration.labels(
            method=method, route=route, status_code=str(status_code)
        ).observe(seconds)

    def render(self) -> Response:
        return Response(generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)


UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    # сырой путь в метку не идёт: сканер не должен плодить серии
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class RequestDurationMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, metrics: Metrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next):
        # сам /metrics не меряем
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self.metrics.observe(
                request.method,
                route_label(request),
                status_code,
                time.perf_counter() - started,
            )
