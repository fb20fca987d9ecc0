"""
Request/response models for the HTTP API.

- wallet.py → CreateWalletRequest, LoadWalletRequest, WalletResponse
- health.py → HealthResponse
"""

from __future__ import annotations

from .health import HealthResponse
from .wallet import CreateWalletRequest, LoadWalletRequest, WalletResponse

__all__ = [
    "CreateWalletRequest",
    "LoadWalletRequest",
    "WalletResponse",
    "HealthResponse",
]
