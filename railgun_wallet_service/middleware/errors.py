from __future__ import annotations

"""
Exception → RFC7807 "problem+json" mappers for FastAPI.

- Produces ``application/problem+json`` for:
    * ApiError subclasses (railgun_wallet_service.errors)
    * Starlette/FastAPI HTTPException
    * RequestValidationError (reported as 400, not 422)
    * Unhandled exceptions (500)
- Every body carries an ``error`` member with the human message, plus
  ``request_id`` when the request-id middleware ran.
- Stack traces go to the log, never into responses.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import ApiError, ValidationError
from ..logging import get_logger

PROBLEM_CT = "application/problem+json"

log = get_logger(__name__)

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    415: "Unsupported Media Type",
    500: "Internal Server Error",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def _finish(request: Request, body: Dict[str, Any]) -> Dict[str, Any]:
    body.setdefault("instance", str(request.url.path))
    rid = getattr(request.state, "request_id", None)
    if rid:
        body.setdefault("request_id", rid)
    return body


def _problem(
    request: Request,
    *,
    status: int,
    message: str,
    code: str,
    extras: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": _TITLES.get(status, "Error"),
        "status": status,
        "code": code,
        "error": message,
        "detail": message,
    }
    if extras:
        for k, v in extras.items():
            body.setdefault(k, v)
    return _finish(request, body)


def _respond(status: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_CT)


# --------------------------- Handlers ---------------------------


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    body = _finish(request, exc.to_problem())
    fields = {k: v for k, v in body.items() if k not in ("type", "title")}
    if exc.status_code >= 500:
        log.error("api_error", **fields)
    else:
        log.warning("api_error", **fields)
    return _respond(exc.status_code, body)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status = int(exc.status_code)
    message = str(exc.detail) if getattr(exc, "detail", None) else _TITLES.get(status, "Error")
    body = _problem(request, status=status, message=message, code="http_error")
    (log.warning if status < 500 else log.error)("http_exception", status=status, error=message)
    headers = getattr(exc, "headers", None)
    resp = _respond(status, body)
    if headers:
        resp.headers.update(headers)
    return resp


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid request: {loc} {first.get('msg', '')}".strip() if loc else "Invalid request body."
    problem = ValidationError(message).to_problem()
    problem["errors"] = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")} for e in errors]
    body = _finish(request, problem)
    log.warning("validation_error", error=message)
    return _respond(400, body)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    api = ApiError.from_unexpected(exc)
    body = _finish(request, api.to_problem())
    log.exception("unhandled_exception", error=api.message, exc_type=exc.__class__.__name__)
    return _respond(500, body)


# --------------------------- Installer ---------------------------


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected_error)


__all__ = ["PROBLEM_CT", "install_error_handlers"]
