"""
railgun_wallet_service.engine
=============================

Everything that touches the external shielded-wallet engine:

- interface  : WalletEngine protocol, ShieldedWallet, StorageHandle
- bridge     : BridgeEngine, the JSON-RPC client for the engine sidecar
- bootstrap  : directory setup + engine start used as the background initializer
- lifecycle  : EngineLifecycle readiness state machine
- poseidon   : field-normalizing wrapper over the engine's Poseidon hash
"""

from __future__ import annotations

from .bridge import BridgeConfig, BridgeEngine, EngineError, EngineTransportError
from .interface import ShieldedWallet, StorageHandle, WalletEngine
from .lifecycle import EngineLifecycle, EngineState, EngineStatus

__all__ = [
    "BridgeConfig",
    "BridgeEngine",
    "EngineError",
    "EngineTransportError",
    "ShieldedWallet",
    "StorageHandle",
    "WalletEngine",
    "EngineLifecycle",
    "EngineState",
    "EngineStatus",
]
