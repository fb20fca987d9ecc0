from __future__ import annotations

"""
Health Router

Endpoints:
  - GET /health  : always 200; reports engine readiness (and the failure
                   reason once initialization has failed).
  - GET /readyz  : same body, but 503 until the engine is ready.
  - GET /version : service version metadata.

None of these are gated on the engine.
"""

import platform
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status

from .. import version as svc_version
from ..deps import get_lifecycle
from ..engine.lifecycle import EngineLifecycle
from ..logging import SERVICE_NAME
from ..models.health import HealthResponse

router = APIRouter(tags=["health"])

_PROCESS_START = time.time()


def _uptime_seconds() -> float:
    return max(0.0, time.time() - _PROCESS_START)


def _health_body(lifecycle: EngineLifecycle) -> Dict[str, Any]:
    return HealthResponse(status="ok", **lifecycle.status.to_dict()).model_dump(by_alias=True, exclude_none=True)


@router.get("/health", summary="Liveness and engine readiness", response_model=None)
async def health(lifecycle: EngineLifecycle = Depends(get_lifecycle)) -> Dict[str, Any]:
    return _health_body(lifecycle)


@router.get("/readyz", summary="Readiness probe", response_model=None)
async def readyz(response: Response, lifecycle: EngineLifecycle = Depends(get_lifecycle)) -> Dict[str, Any]:
    """
    200 once the engine is ready; 503 while initializing or after a failed
    initialization.
    """
    body = _health_body(lifecycle)
    if not lifecycle.is_ready():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return body


@router.get("/version", summary="Service version", response_model=None)
async def version() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": svc_version.__version__,
        "git": svc_version.git_describe(),
        "python": {"version": platform.python_version(), "impl": platform.python_implementation()},
        "started_at": datetime.fromtimestamp(_PROCESS_START, tz=timezone.utc).isoformat(),
        "uptime_seconds": round(_uptime_seconds(), 3),
    }


__all__ = ["router"]
