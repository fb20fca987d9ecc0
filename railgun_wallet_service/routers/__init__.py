"""HTTP routers: health/readiness probes and the wallet endpoints."""

from .health import router as health_router
from .wallet import router as wallet_router

__all__ = ["health_router", "wallet_router"]
