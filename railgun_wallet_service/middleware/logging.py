from __future__ import annotations

"""
Access logging middleware.

One structured line per request with method, route, status and latency.
Request bodies are never logged: they carry passwords and mnemonics.
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..logging import get_logger

log = get_logger("railgun.access")

_QUIET_PATHS = frozenset({"/health", "/readyz", "/metrics"})


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    if route is None:
        return request.url.path
    return getattr(route, "path_format", None) or getattr(route, "path", "") or request.url.path


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000.0, 2)
            path = request.url.path
            fields = dict(
                method=request.method,
                path=path,
                route=_route_template(request),
                status=status,
                latency_ms=latency_ms,
                client_ip=request.client.host if request.client else "",
            )
            if status >= 500:
                log.error("http.access", **fields)
            elif status >= 400:
                log.warning("http.access", **fields)
            elif path in _QUIET_PATHS:
                # Probes hit these every few seconds.
                log.debug("http.access", **fields)
            else:
                log.info("http.access", **fields)


def install_access_log_middleware(app: FastAPI) -> None:
    app.add_middleware(AccessLogMiddleware)


__all__ = ["AccessLogMiddleware", "install_access_log_middleware"]
