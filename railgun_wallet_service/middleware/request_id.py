from __future__ import annotations

"""
Request ID middleware.

- Propagates an inbound **X-Request-Id** or generates one (uuid4 hex).
- Exposes it as ``request.state.request_id`` for handlers and error bodies.
- Binds it into structlog contextvars for the duration of the request so
  every log line emitted while serving it carries ``request_id``.
- Echoes the id back on the response.

Request ids are not secrets; they are safe to echo in logs and headers.
"""

import uuid
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..logging import bind_request_context, clear_request_context

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header = header

    async def dispatch(self, request: Request, call_next):
        req_id: Optional[str] = request.headers.get(self.header.lower())
        if not req_id:
            req_id = uuid.uuid4().hex

        request.state.request_id = req_id
        bind_request_context(request_id=req_id)
        try:
            response: Response = await call_next(request)
        finally:
            # Never leak the id into the next request served by this task.
            clear_request_context("request_id")

        response.headers[self.header] = req_id
        return response


def install_request_id_middleware(app: FastAPI, *, header: str = REQUEST_ID_HEADER) -> None:
    app.add_middleware(RequestIdMiddleware, header=header)


__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "install_request_id_middleware"]
