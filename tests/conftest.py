from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from railgun_wallet_service.app import create_app
from railgun_wallet_service.config import Config
from railgun_wallet_service.engine.interface import ShieldedWallet, StorageHandle

# A well-known BIP-39 test phrase and the address common wallets show for it
# at m/44'/60'/0'/0/0.
ABANDON_MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
ABANDON_ADDRESS = "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"


# ----------------------------
# Engine double
# ----------------------------
class FakeEngine:
    """
    In-memory stand-in for the shielded-wallet engine.

    - Wallet ids are derived from the mnemonic alone (so loading the same
      phrase twice agrees), unless ``ids`` is given, in which case successive
      create_wallet calls return those ids in order.
    - ``fail_with`` makes create_wallet raise; ``hang`` makes it never return.
    """

    def __init__(
        self,
        *,
        ids: Optional[Sequence[str]] = None,
        fail_with: Optional[BaseException] = None,
        hang: bool = False,
        start_error: Optional[BaseException] = None,
        poseidon_result: str = "0x1f",
    ) -> None:
        self._ids = list(ids) if ids is not None else None
        self.fail_with = fail_with
        self.hang = hang
        self.start_error = start_error
        self.poseidon_result = poseidon_result

        self.calls: List[tuple] = []
        self.started: Optional[Dict[str, Any]] = None
        self.prover: Optional[str] = None
        self.loggers: Optional[tuple] = None
        self.poseidon_args: Optional[List[str]] = None
        self.closed = False

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
    ) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = dict(
            source=source,
            storage=storage,
            debug=debug,
            artifact_path=artifact_path,
            use_native_artifacts=use_native_artifacts,
            skip_merkletree_scans=skip_merkletree_scans,
            poi_node_urls=list(poi_node_urls),
            custom_poi_list=custom_poi_list,
            init_merkletrees=init_merkletrees,
        )

    async def create_wallet(self, derived_key_hex: str, mnemonic: str) -> ShieldedWallet:
        self.calls.append((derived_key_hex, mnemonic))
        if self.fail_with is not None:
            raise self.fail_with
        if self.hang:
            await asyncio.Event().wait()
        digest = hashlib.sha256(mnemonic.encode()).hexdigest()
        wid = self._ids.pop(0) if self._ids else digest[:32]
        return ShieldedWallet(id=wid, railgun_address=f"0zk1q{digest[32:]}")

    async def set_prover(self, backend: str) -> None:
        self.prover = backend

    def set_loggers(self, info, error) -> None:
        self.loggers = (info, error)

    async def poseidon_hex(self, args: Sequence[str]) -> str:
        self.poseidon_args = list(args)
        return self.poseidon_result

    async def close(self) -> None:
        self.closed = True


async def _noop_initializer() -> None:
    return None


# ----------------------------
# Config & app fixtures
# ----------------------------
def make_config(tmp_path: Path, **overrides: Any) -> Config:
    kwargs: Dict[str, Any] = dict(data_dir=tmp_path / "railgun", engine_call_timeout_s=5.0)
    kwargs.update(overrides)
    return Config(_env_file=None, **kwargs)  # type: ignore[call-arg]


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return make_config(tmp_path)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def app(config: Config, engine: FakeEngine) -> FastAPI:
    """
    App wired to the fake engine. The lifespan is not run by ASGITransport,
    so the engine stays "initializing" until a test settles it.
    """
    return create_app(config, engine=engine, initializer=_noop_initializer)


@pytest.fixture
def ready_app(app: FastAPI) -> FastAPI:
    app.state.lifecycle.mark_ready()
    return app


async def _client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
async def aclient(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async for c in _client(app):
        yield c


@pytest.fixture
async def ready_client(ready_app: FastAPI) -> AsyncIterator[AsyncClient]:
    async for c in _client(ready_app):
        yield c
