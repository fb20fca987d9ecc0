"""
Uvicorn launcher for the Railgun Wallet Service.

Usage:
  python -m railgun_wallet_service.main [--host 0.0.0.0] [--port 4000]
                                        [--reload] [--log-level info]

Environment overrides (if flags not provided):
  HOST, PORT, RELOAD, LOG_LEVEL

Always a single worker: the engine holds process-local state.
"""

from __future__ import annotations

import argparse
import os
from typing import Optional

import uvicorn

from .config import load_config
from .logging import setup_logging


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "y", "on")


def main(argv: Optional[list[str]] = None) -> None:
    cfg = load_config()

    parser = argparse.ArgumentParser(description="Run the Railgun Wallet Service (uvicorn)")
    parser.add_argument("--host", default=cfg.host, help="Bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=cfg.port, help="Port (default: %(default)s)")
    parser.add_argument("--reload", action="store_true", default=_env_bool("RELOAD", False), help="Enable autoreload (dev only)")
    parser.add_argument("--log-level", default=cfg.log_level.lower(), help="Log level (default: %(default)s)")
    parser.add_argument("--proxy-headers", action=argparse.BooleanOptionalAction, default=True, help="Use X-Forwarded-* headers (default: on)")
    parser.add_argument("--forwarded-allow-ips", default="*", help="Comma list of trusted proxies (default: *)")

    args = parser.parse_args(argv)

    setup_logging(level=args.log_level.upper())

    # The factory sets up logging again inside reload children.
    uvicorn.run(
        "railgun_wallet_service.app:create_production_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_config=None,
        proxy_headers=args.proxy_headers,
        forwarded_allow_ips=args.forwarded_allow_ips,
        reload=args.reload,
        workers=1,
    )


if __name__ == "__main__":
    main()
