from __future__ import annotations

"""
Wallet Router

Endpoints:
  - POST /wallet/create : generate a fresh 12-word mnemonic and derive the
                          shielded wallet plus its public address.
  - POST /wallet/load   : derive the same from a caller-supplied mnemonic.

Both run the password through scrypt (fresh random salt per request),
hand the derived key to the engine and return the identity together with
the determinism report (``testResults``; empty means both derivation
rounds agreed).

Gating:
  - /wallet/create always requires a ready engine (503 otherwise).
  - /wallet/load is gated only when GATE_WALLET_LOAD is enabled.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends

from ..config import Config
from ..deps import get_config, get_engine, get_lifecycle, get_metrics, require_engine_ready
from ..engine.interface import WalletEngine
from ..engine.lifecycle import EngineLifecycle
from ..errors import ApiError, GatewayTimeout, ValidationError
from ..logging import get_logger
from ..metrics import Metrics
from ..models.wallet import CreateWalletRequest, LoadWalletRequest, WalletResponse
from ..services.accounts import generate_mnemonic
from ..services.keys import derive_key
from ..services.wallet import derive_and_verify

log = get_logger(__name__)

router = APIRouter(prefix="/wallet", tags=["wallet"])

MISSING_CREDENTIALS = "Mnemonic and password are required."
MISSING_PASSWORD = "Password is required."


def _count(metrics: Optional[Metrics], endpoint: str, outcome: str) -> None:
    if metrics is not None:
        metrics.wallet_derivations_total.labels(endpoint, outcome).inc()


async def _derive_wallet(
    endpoint: str,
    mnemonic: str,
    password: str,
    cfg: Config,
    engine: WalletEngine,
    metrics: Optional[Metrics],
) -> WalletResponse:
    try:
        if metrics is not None:
            with metrics.kdf_duration_seconds.time():
                key = await derive_key(password)
        else:
            key = await derive_key(password)

        result = await derive_and_verify(
            engine,
            mnemonic,
            key.key_hex,
            verify=cfg.verify_derivation,
            call_timeout=cfg.engine_call_timeout_s,
        )
    except GatewayTimeout:
        _count(metrics, endpoint, "timeout")
        raise
    except ApiError:
        _count(metrics, endpoint, "error")
        raise
    except Exception as e:
        _count(metrics, endpoint, "error")
        raise ApiError.from_unexpected(e) from e

    if metrics is not None:
        for m in result.mismatches:
            metrics.wallet_verification_mismatches_total.labels(m.check).inc()
    _count(metrics, endpoint, "ok" if result.deterministic else "mismatch")
    log.info(
        "wallet.derived",
        endpoint=endpoint,
        wallet_id=result.id,
        public_address=result.public_address,
        deterministic=result.deterministic,
    )

    body = result.to_response()
    if cfg.expose_kdf_salt:
        body["kdfSalt"] = key.salt_hex
    return WalletResponse(**body)


@router.post(
    "/create",
    summary="Create a new shielded wallet",
    response_model=WalletResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_engine_ready)],
)
async def create_wallet(
    req: Optional[CreateWalletRequest] = Body(None),
    cfg: Config = Depends(get_config),
    engine: WalletEngine = Depends(get_engine),
    metrics: Optional[Metrics] = Depends(get_metrics),
) -> WalletResponse:
    """
    Generate a mnemonic and derive the wallet it controls.

    The mnemonic is returned exactly once, in this response; the service
    keeps no copy.
    """
    password = req.password if req is not None else None
    if not password:
        if not cfg.allow_default_password:
            raise ValidationError(MISSING_PASSWORD)
        log.warning("wallet.create.default_password")
        password = cfg.default_password

    mnemonic = generate_mnemonic(12)
    return await _derive_wallet("create", mnemonic, password, cfg, engine, metrics)


@router.post(
    "/load",
    summary="Load a shielded wallet from its mnemonic",
    response_model=WalletResponse,
    response_model_exclude_none=True,
)
async def load_wallet(
    req: Optional[LoadWalletRequest] = Body(None),
    cfg: Config = Depends(get_config),
    engine: WalletEngine = Depends(get_engine),
    lifecycle: EngineLifecycle = Depends(get_lifecycle),
    metrics: Optional[Metrics] = Depends(get_metrics),
) -> WalletResponse:
    if cfg.gate_wallet_load:
        lifecycle.require_ready()

    mnemonic = (req.mnemonic or "").strip() if req is not None else ""
    password = req.password if req is not None else None
    if not mnemonic or not password:
        raise ValidationError(MISSING_CREDENTIALS)

    return await _derive_wallet("load", mnemonic, password, cfg, engine, metrics)


__all__ = ["router", "MISSING_CREDENTIALS", "MISSING_PASSWORD"]
