"""
Wallet derivation with inline determinism check.

``derive_and_verify`` asks the engine for the shielded wallet and derives
the public address, then (unless disabled) does both again from the same
inputs and compares the two rounds. Wallet creation is expected to be a
pure function of (derived key, mnemonic); any difference is an engine or
input-handling bug, reported in ``test_results`` rather than raised.

The second round doubles engine cost per request. It is on by default and
can be switched off with ``VERIFY_DERIVATION=false``.

Rounds run strictly one after the other. Every external call is bounded by
``call_timeout``; expiry raises GatewayTimeout. Any other failure raises
WalletDerivationError carrying the underlying message. Nothing is
persisted here.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from ..engine.interface import ShieldedWallet, WalletEngine
from ..errors import ApiError, GatewayTimeout, WalletDerivationError
from ..logging import get_logger
from .accounts import address_from_mnemonic_async

log = get_logger(__name__)

T = TypeVar("T")
AddressDeriver = Callable[[str], Awaitable[str]]

CHECK_WALLET_ID = "wallet_id"
CHECK_PUBLIC_ADDRESS = "public_address"
CHECK_RAILGUN_ADDRESS = "railgun_address"


@dataclass(frozen=True)
class Mismatch:
    check: str
    message: str


@dataclass
class WalletDerivation:
    id: str
    railgun_address: str
    public_address: str
    mnemonic: str
    test_results: List[str] = field(default_factory=list)
    mismatches: List[Mismatch] = field(default_factory=list)

    @property
    def deterministic(self) -> bool:
        return not self.test_results

    def to_response(self) -> Dict[str, Any]:
        return {
            "railgunWalletID": self.id,
            "railgunWalletAddress": self.railgun_address,
            "publicAddress": self.public_address,
            "mnemonic": self.mnemonic,
            "testResults": list(self.test_results),
        }


async def _bounded(what: str, aw: Awaitable[T], timeout: Optional[float]) -> T:
    # Only expiry of our own deadline maps to GatewayTimeout.
    task = asyncio.ensure_future(aw)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if not done:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise GatewayTimeout(f"{what} timed out after {timeout}s")
    try:
        return task.result()
    except ApiError:
        raise
    except Exception as e:
        raise WalletDerivationError(str(e) or e.__class__.__name__, details={"step": what}) from e


async def _derive_round(
    engine: WalletEngine,
    mnemonic: str,
    derived_key_hex: str,
    derive_address: AddressDeriver,
    call_timeout: Optional[float],
) -> Tuple[ShieldedWallet, str]:
    wallet = await _bounded("createWallet", engine.create_wallet(derived_key_hex, mnemonic), call_timeout)
    address = await _bounded("addressFromMnemonic", derive_address(mnemonic), call_timeout)
    return wallet, address


def compare_rounds(
    first: Tuple[ShieldedWallet, str],
    second: Tuple[ShieldedWallet, str],
) -> List[Mismatch]:
    """Compare two derivation rounds: wallet id, public address, railgun address."""
    (wallet_a, address_a), (wallet_b, address_b) = first, second
    out: List[Mismatch] = []
    if wallet_a.id != wallet_b.id:
        out.append(Mismatch(CHECK_WALLET_ID, f"Wallet ID mismatch: {wallet_a.id} vs {wallet_b.id}"))
    if address_a != address_b:
        out.append(Mismatch(CHECK_PUBLIC_ADDRESS, f"Public address mismatch: {address_a} vs {address_b}"))
    if wallet_a.railgun_address != wallet_b.railgun_address:
        out.append(
            Mismatch(
                CHECK_RAILGUN_ADDRESS,
                f"Railgun address mismatch: {wallet_a.railgun_address} vs {wallet_b.railgun_address}",
            )
        )
    return out


async def derive_and_verify(
    engine: WalletEngine,
    mnemonic: str,
    derived_key_hex: str,
    *,
    verify: bool = True,
    call_timeout: Optional[float] = None,
    derive_address: AddressDeriver = address_from_mnemonic_async,
) -> WalletDerivation:
    first = await _derive_round(engine, mnemonic, derived_key_hex, derive_address, call_timeout)
    wallet, address = first

    mismatches: List[Mismatch] = []
    if verify:
        second = await _derive_round(engine, mnemonic, derived_key_hex, derive_address, call_timeout)
        mismatches = compare_rounds(first, second)
        if mismatches:
            log.error("wallet.verify.mismatch", wallet_id=wallet.id, test_results=[m.message for m in mismatches])
        else:
            log.info("wallet.verify.ok", wallet_id=wallet.id)

    return WalletDerivation(
        id=wallet.id,
        railgun_address=wallet.railgun_address,
        public_address=address,
        mnemonic=mnemonic,
        test_results=[m.message for m in mismatches],
        mismatches=mismatches,
    )


__all__ = [
    "CHECK_WALLET_ID",
    "CHECK_PUBLIC_ADDRESS",
    "CHECK_RAILGUN_ADDRESS",
    "Mismatch",
    "WalletDerivation",
    "compare_rounds",
    "derive_and_verify",
]
