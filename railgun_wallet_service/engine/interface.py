from __future__ import annotations

"""
Capability surface of the shielded-wallet engine.

The engine itself (key derivation internals, merkle-tree scanning, proof
generation, POI membership) lives outside this service. Everything here
talks to it through :class:`WalletEngine`, so tests can substitute a double
that returns controllable, even non-deterministic, values.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol, Sequence, runtime_checkable

LogFn = Callable[[str], None]


@dataclass(frozen=True)
class ShieldedWallet:
    """Opaque identity returned by the engine; compared only for equality."""

    id: str
    railgun_address: str


@dataclass(frozen=True)
class StorageHandle:
    """
    Key-value store handle handed to the engine on start.

    The layout behind ``path`` is owned by the engine.
    """

    path: Path

    def describe(self) -> str:
        return str(self.path)


@runtime_checkable
class WalletEngine(Protocol):
    async def start_engine(
        self,
        source: str,
        storage: StorageHandle,
        debug: bool,
        artifact_path: str,
        use_native_artifacts: bool,
        skip_merkletree_scans: bool,
        poi_node_urls: Sequence[str],
        custom_poi_list: Optional[Sequence[dict]],
        init_merkletrees: bool,
    ) -> None: ...

    async def create_wallet(self, derived_key_hex: str, mnemonic: str) -> ShieldedWallet: ...

    async def set_prover(self, backend: str) -> None: ...

    def set_loggers(self, info: LogFn, error: LogFn) -> None: ...

    async def poseidon_hex(self, args: Sequence[str]) -> str: ...

    async def close(self) -> None: ...


EngineInitializer = Callable[[], Awaitable[None]]


__all__ = [
    "LogFn",
    "ShieldedWallet",
    "StorageHandle",
    "WalletEngine",
    "EngineInitializer",
]
