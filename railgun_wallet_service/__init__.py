"""
Railgun Wallet Service
======================

FastAPI service deriving a shielded wallet (plus its linked public-chain
address) from a mnemonic and password, on top of a long-lived engine that
initializes in the background.

This package exposes:

- ``__version__``: semantic version string
- ``build_app()``: convenience creator for a configured FastAPI app

Prefer importing submodules directly for specific concerns:
``railgun_wallet_service.config``, ``railgun_wallet_service.engine``,
``railgun_wallet_service.services.*``, etc.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__", "build_app"]


def build_app():
    """
    Create and return a fully configured FastAPI application.

    Importing lazily avoids importing FastAPI (and the engine bridge) when
    consumers only need version metadata.
    """
    from .app import create_app

    return create_app()
