from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

# Local modules
from .version import __version__
from .config import Config, load_config
from .engine.bootstrap import make_initializer
from .engine.bridge import BridgeConfig, BridgeEngine
from .engine.interface import EngineInitializer, WalletEngine
from .engine.lifecycle import EngineLifecycle
from .logging import SERVICE_NAME, get_logger, setup_logging
from .metrics import setup_metrics
from .middleware.errors import install_error_handlers
from .middleware.logging import install_access_log_middleware
from .middleware.request_id import install_request_id_middleware

# Routers
from .routers.health import router as health_router
from .routers.wallet import router as wallet_router

log = get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Start engine initialization in the background, serve immediately, then
    cancel any unfinished initialization and close the engine on shutdown.
    """
    cfg: Config = app.state.config
    lifecycle: EngineLifecycle = app.state.lifecycle
    engine: WalletEngine = app.state.engine
    initializer: EngineInitializer = app.state.engine_initializer

    # Not awaited: /health answers while the engine is still coming up.
    lifecycle.launch(initializer)
    log.info(
        "service.start",
        version=__version__,
        verify_derivation=cfg.verify_derivation,
        gate_wallet_load=cfg.gate_wallet_load,
        engine_bridge=cfg.engine_bridge_url,
    )
    if cfg.allow_default_password:
        log.warning("service.default_password_enabled")
    try:
        yield
    finally:
        await lifecycle.shutdown()
        await engine.close()
        log.info("service.stop")


def create_app(
    config: Optional[Config] = None,
    *,
    engine: Optional[WalletEngine] = None,
    initializer: Optional[EngineInitializer] = None,
) -> FastAPI:
    """
    FastAPI factory. Wires the engine, its lifecycle, middleware, metrics
    and routers.

    ``engine`` defaults to the sidecar bridge at ENGINE_BRIDGE_URL and
    ``initializer`` to the standard bootstrap for that engine; tests pass
    fakes for both.
    """
    cfg = config or load_config()
    if engine is None:
        engine = BridgeEngine(BridgeConfig(url=cfg.engine_bridge_url, timeout_s=cfg.engine_call_timeout_s))
    if initializer is None:
        initializer = make_initializer(engine, cfg.engine_options())

    app = FastAPI(
        title="Railgun Wallet Service",
        version=__version__,
        lifespan=_lifespan,
    )
    app.state.config = cfg
    app.state.engine = engine
    app.state.engine_initializer = initializer
    app.state.lifecycle = EngineLifecycle()

    # Core middleware stack (last added runs outermost; the request id must
    # be bound before the access line is written)
    install_access_log_middleware(app)
    install_request_id_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error → JSON problem+status mapping
    install_error_handlers(app)

    # Metrics (/metrics)
    setup_metrics(app, service_name=SERVICE_NAME, service_version=__version__)

    # Routers
    app.include_router(health_router)
    app.include_router(wallet_router)

    return app


def create_production_app() -> FastAPI:
    """
    Uvicorn factory for real deployments: configures logging in the serving
    process before building the app.
    """
    cfg = load_config()
    setup_logging(level=cfg.log_level)
    return create_app(cfg)


__all__ = ["create_app", "create_production_app"]
