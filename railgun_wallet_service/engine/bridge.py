"""
JSON-RPC client for the shielded-wallet engine sidecar.

The engine SDK runs in a small sidecar process; this adapter implements
:class:`~railgun_wallet_service.engine.interface.WalletEngine` on top of it.

- one async httpx client per engine, opened lazily
- JSON-RPC 2.0 envelopes, lowercase method namespaces:
  * engine.start / engine.setProver
  * wallet.create
  * poseidon.hash
- engine log lines returned in a response (``"logs": [{level, message}]``)
  are forwarded to the loggers registered with :meth:`set_loggers`

No retries: a failed call surfaces immediately to the caller.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import httpx

from .interface import LogFn, ShieldedWallet, StorageHandle


# ----------------------------- Errors ---------------------------------------


class EngineError(Exception):
    """Error object returned by the engine (JSON-RPC ``error`` member)."""

    def __init__(self, code: int, message: str, data: Any | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


class EngineTransportError(EngineError):
    """Network/HTTP failure talking to the sidecar."""

    def __init__(self, message: str):
        super().__init__(-32099, message)


# ----------------------------- Client ---------------------------------------


@dataclass
class BridgeConfig:
    url: str
    timeout_s: Optional[float] = 120.0
    headers: Optional[Dict[str, str]] = None


def _noop(_: str) -> None:
    return None


class BridgeEngine:
    """
    Async JSON-RPC engine client.
    """

    def __init__(self, config: BridgeConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._cfg = config
        self._transport = transport
        self._ids = itertools.count(1)
        self._client: Optional[httpx.AsyncClient] = None
        self._info: LogFn = _noop
        self._error: LogFn = _noop

    # ---------- lifecycle ----------

    async def open(self) -> None:
        if self._client is None:
            headers = {"content-type": "application/json", "accept": "application/json"}
            headers.update(self._cfg.headers or {})
            self._client = httpx.AsyncClient(
                timeout=self._cfg.timeout_s,
                headers=headers,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BridgeEngine":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---------- transport ----------

    async def _call(self, method: str, params: Dict[str, Any], *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> Any:
        if self._client is None:
            await self.open()
        assert self._client is not None

        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._client.post(self._cfg.url, json=payload, timeout=timeout)
        except httpx.HTTPError as exc:
            raise EngineTransportError(f"{method}: {exc}") from exc

        if resp.status_code != 200:
            raise EngineTransportError(f"{method}: HTTP {resp.status_code}: {resp.text[:256]!r}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise EngineTransportError(f"{method}: invalid JSON response") from exc
        if not isinstance(data, dict):
            raise EngineTransportError(f"{method}: response is not a JSON-RPC object")

        self._forward_logs(data.get("logs"))
        err = data.get("error")
        if err is not None:
            if not isinstance(err, dict):
                raise EngineError(-32000, str(err))
            raise EngineError(int(err.get("code", -32000)), str(err.get("message", "Unknown engine error")), err.get("data"))
        return data.get("result")

    def _forward_logs(self, logs: Any) -> None:
        if not isinstance(logs, list):
            return
        for entry in logs:
            if not isinstance(entry, dict):
                continue
            msg = str(entry.get("message", ""))
            if entry.get("level") == "error":
                self._error(msg)
            else:
                self._info(msg)

    # ---------- WalletEngine ----------

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
        # Merkle-tree initialization can take minutes; no client timeout here.
        await self._call(
            "engine.start",
            {
                "walletSource": source,
                "dbPath": storage.describe(),
                "shouldDebug": debug,
                "artifactPath": artifact_path,
                "useNativeArtifacts": use_native_artifacts,
                "skipMerkletreeScans": skip_merkletree_scans,
                "poiNodeURLs": list(poi_node_urls),
                "customPOILists": list(custom_poi_list) if custom_poi_list is not None else None,
                "shouldInitializeMerkletrees": init_merkletrees,
            },
            timeout=None,
        )

    async def create_wallet(self, derived_key_hex: str, mnemonic: str) -> ShieldedWallet:
        result = await self._call("wallet.create", {"encryptionKey": derived_key_hex, "mnemonic": mnemonic})
        if not isinstance(result, dict) or "id" not in result or "railgunAddress" not in result:
            raise EngineError(-32001, f"wallet.create returned an unexpected shape: {result!r}")
        return ShieldedWallet(id=str(result["id"]), railgun_address=str(result["railgunAddress"]))

    async def set_prover(self, backend: str) -> None:
        await self._call("engine.setProver", {"backend": backend})

    def set_loggers(self, info: LogFn, error: LogFn) -> None:
        self._info = info
        self._error = error

    async def poseidon_hex(self, args: Sequence[str]) -> str:
        result = await self._call("poseidon.hash", {"inputs": list(args)})
        return str(result)


__all__ = [
    "BridgeConfig",
    "BridgeEngine",
    "EngineError",
    "EngineTransportError",
]
