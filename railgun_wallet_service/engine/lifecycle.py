from __future__ import annotations

"""
Engine lifecycle controller.

Tracks background initialization of the wallet engine and gates handlers
that need it.

States
------
    initializing ──ok──▶ ready
         │
         └──exception──▶ failed(reason)

Each transition happens at most once and never reverts. A failed bootstrap
is logged and recorded, never retried, and does not crash the process: the
service keeps answering ``/health`` (reporting the failure) and returns 503
from gated routes until it is restarted by its supervisor.

One controller is created per application and handed to handlers through
``railgun_wallet_service.deps``.
"""

import asyncio
import enum
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import EngineInitializationFailure, ServiceUnavailable
from ..logging import get_logger
from .interface import EngineInitializer

log = get_logger(__name__)


class EngineState(str, enum.Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class EngineStatus:
    state: EngineState
    failure_reason: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.state is EngineState.READY

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"railgunReady": self.ready, "engineState": self.state.value}
        if self.failure_reason is not None:
            out["engineError"] = self.failure_reason
        return out


class EngineLifecycle:
    """
    Write-once readiness cell plus the background task that fills it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Replaced wholesale on transition; readers never need the lock.
        self._status = EngineStatus(EngineState.INITIALIZING)
        self._task: Optional[asyncio.Task] = None

    # ---------- queries ----------

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def state(self) -> EngineState:
        return self._status.state

    @property
    def failure_reason(self) -> Optional[str]:
        return self._status.failure_reason

    def snapshot(self) -> EngineStatus:
        """Consistent (state, reason) pair; same object as ``status``."""
        return self._status

    def is_ready(self) -> bool:
        return self._status.ready

    def require_ready(self) -> None:
        """Raise ServiceUnavailable unless the engine finished initializing."""
        status = self._status
        if status.state is EngineState.READY:
            return
        if status.state is EngineState.FAILED:
            raise ServiceUnavailable(
                f"RAILGUN engine initialization failed: {status.failure_reason}",
                details={"engineState": status.state.value},
            )
        raise ServiceUnavailable(
            "RAILGUN engine is still initializing; retry shortly.",
            details={"engineState": status.state.value},
        )

    # ---------- transitions ----------

    def _transition(self, new: EngineStatus) -> None:
        with self._lock:
            current = self._status.state
            if current is not EngineState.INITIALIZING:
                raise RuntimeError(f"engine lifecycle already settled as {current.value}")
            self._status = new

    def mark_ready(self) -> None:
        self._transition(EngineStatus(EngineState.READY))
        log.info("engine.ready")

    def mark_failed(self, reason: str) -> None:
        self._transition(EngineStatus(EngineState.FAILED, failure_reason=reason))
        log.error("engine.failed", reason=reason)

    # ---------- background initialization ----------

    async def initialize(self, initializer: EngineInitializer) -> None:
        """
        Run the initializer to completion and settle the state.

        Failures are recorded, not raised.
        """
        log.info("engine.init.start")
        try:
            await initializer()
        except asyncio.CancelledError:
            log.warning("engine.init.cancelled")
            raise
        except Exception as exc:
            failure = EngineInitializationFailure(f"{type(exc).__name__}: {exc}")
            log.exception("engine.init.error", error=str(failure))
            self.mark_failed(str(failure))
            return
        self.mark_ready()

    def launch(self, initializer: EngineInitializer) -> asyncio.Task:
        """
        Start initialization as a background task on the running loop.

        Only one initialization may ever be launched.
        """
        if self._task is not None:
            raise RuntimeError("engine initialization already launched")
        self._task = asyncio.create_task(self.initialize(initializer), name="engine-init")
        return self._task

    async def wait(self, timeout: Optional[float] = None) -> EngineStatus:
        """Wait for the launched initialization to settle (used by tests and the CLI)."""
        if self._task is not None:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        return self._status

    async def shutdown(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = ["EngineState", "EngineStatus", "EngineLifecycle"]
