from __future__ import annotations

"""
railgun_wallet_service.deps
===========================
FastAPI dependency providers.

The app factory stores the shared collaborators on ``app.state``; handlers
receive them through these providers instead of module globals, which
keeps the routes testable with fakes:

- ``app.state.config``     → Config
- ``app.state.engine``     → WalletEngine
- ``app.state.lifecycle``  → EngineLifecycle
- ``app.state.metrics``    → Metrics (optional)

Typical usage
-------------
    @router.post("/wallet/create", dependencies=[Depends(require_engine_ready)])
    async def create(engine: WalletEngine = Depends(get_engine)): ...
"""

from typing import Optional

from fastapi import Depends, Request

from .config import Config
from .engine.interface import WalletEngine
from .engine.lifecycle import EngineLifecycle
from .metrics import Metrics


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_engine(request: Request) -> WalletEngine:
    return request.app.state.engine


def get_lifecycle(request: Request) -> EngineLifecycle:
    return request.app.state.lifecycle


def get_metrics(request: Request) -> Optional[Metrics]:
    return getattr(request.app.state, "metrics", None)


def require_engine_ready(lifecycle: EngineLifecycle = Depends(get_lifecycle)) -> None:
    """Short-circuit with 503 before any engine work when it is not ready."""
    lifecycle.require_ready()


__all__ = [
    "get_config",
    "get_engine",
    "get_lifecycle",
    "get_metrics",
    "require_engine_ready",
]
