from __future__ import annotations

"""
Prometheus metrics and the /metrics exporter.

HTTP metrics (ASGI middleware):
    http_requests_total{method,path,status}
    http_request_duration_seconds{method,path,status}
    http_inprogress_requests{method,path}

Domain metrics:
    wallet_derivations_total{endpoint,outcome}
    wallet_verification_mismatches_total{check}
    kdf_duration_seconds
    engine_state{state}          1 for the current lifecycle state, else 0

Each app gets its own CollectorRegistry so test apps never collide.
"""

import os
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, Info, PlatformCollector,
                               ProcessCollector, generate_latest)
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send


class Metrics:
    """
    Holder for the registry and metric objects. Exposed via app.state.metrics.
    """

    def __init__(self, service_name: str, service_version: Optional[str] = None) -> None:
        self.registry = CollectorRegistry()
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)

        self.http_inprogress = Gauge(
            "http_inprogress_requests",
            "In-progress HTTP requests",
            ["method", "path"],
            registry=self.registry,
        )
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self.registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "path", "status"],
            # Wallet derivation runs scrypt and up to four engine calls.
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self.registry,
        )

        self.wallet_derivations_total = Counter(
            "wallet_derivations_total",
            "Wallet derivation requests by endpoint and outcome",
            ["endpoint", "outcome"],
            registry=self.registry,
        )
        self.wallet_verification_mismatches_total = Counter(
            "wallet_verification_mismatches_total",
            "Determinism check failures by compared field",
            ["check"],
            registry=self.registry,
        )
        self.kdf_duration_seconds = Histogram(
            "kdf_duration_seconds",
            "Password KDF wall time",
            buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self.registry,
        )
        self.engine_state = Gauge(
            "engine_state",
            "Current engine lifecycle state",
            ["state"],
            registry=self.registry,
        )

        self.service_info = Info("service", "Service metadata", registry=self.registry)
        payload = {"name": service_name}
        if service_version:
            payload["version"] = service_version
        self.service_info.info(payload)

    def set_engine_state(self, current: str, states=("initializing", "ready", "failed")) -> None:
        for s in states:
            self.engine_state.labels(s).set(1 if s == current else 0)

    def render_latest(self) -> bytes:
        return generate_latest(self.registry)


def _extract_path_template(scope: Scope) -> str:
    route = scope.get("route")
    for attr in ("path_format", "path"):
        if route is not None and hasattr(route, attr):
            val = getattr(route, attr, None)
            if isinstance(val, str) and val:
                return val
    return scope.get("path") or ""


class PrometheusMiddleware:
    """
    Minimal ASGI middleware recording HTTP metrics.
    """

    def __init__(self, app: ASGIApp, metrics: Metrics):
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        path_tmpl = _extract_path_template(scope)
        start = time.perf_counter()
        status_code = 500

        self.metrics.http_inprogress.labels(method, path_tmpl).inc()

        async def send_wrapped(message: Dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapped)
        finally:
            duration = time.perf_counter() - start
            labels = (method, path_tmpl, str(status_code))
            try:
                self.metrics.http_requests_total.labels(*labels).inc()
                self.metrics.http_request_duration_seconds.labels(*labels).observe(duration)
            finally:
                self.metrics.http_inprogress.labels(method, path_tmpl).dec()


def create_metrics_router(metrics: Metrics, path: str = "/metrics") -> APIRouter:
    router = APIRouter()

    @router.get(path, include_in_schema=False)
    async def metrics_endpoint(request: Request) -> Response:
        lifecycle = getattr(request.app.state, "lifecycle", None)
        if lifecycle is not None:
            metrics.set_engine_state(lifecycle.state.value)
        try:
            return Response(content=metrics.render_latest(), media_type=CONTENT_TYPE_LATEST)
        except Exception as e:
            # Exporters must never take the service down.
            return PlainTextResponse(f"metrics error: {e}", status_code=500)

    return router


def setup_metrics(
    app: FastAPI,
    *,
    service_name: str = "railgun-wallet-service",
    service_version: Optional[str] = None,
    path: Optional[str] = None,
) -> Metrics:
    """
    Create the registry, add the HTTP middleware, mount the exporter and
    store the Metrics instance on ``app.state.metrics``.
    """
    metrics = Metrics(service_name=service_name, service_version=service_version)
    app.add_middleware(PrometheusMiddleware, metrics=metrics)
    app.include_router(create_metrics_router(metrics, path or os.getenv("METRICS_PATH") or "/metrics"))
    app.state.metrics = metrics
    return metrics


__all__ = [
    "Metrics",
    "PrometheusMiddleware",
    "create_metrics_router",
    "setup_metrics",
]
