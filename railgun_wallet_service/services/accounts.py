"""
Public-chain keypair helpers (BIP-39 / BIP-44).

- ``generate_mnemonic`` produces a fresh English phrase with the `mnemonic`
  package (12 words by default).
- ``address_from_mnemonic`` derives the EIP-55 address at the standard
  Ethereum path m/44'/60'/0'/0/0 with an empty passphrase, matching what
  common wallets show for the same phrase.
"""

from __future__ import annotations

import asyncio

from eth_account import Account
from mnemonic import Mnemonic

ETH_DERIVATION_PATH = "m/44'/60'/0'/0/0"

Account.enable_unaudited_hdwallet_features()

_WORDS_TO_STRENGTH = {12: 128, 15: 160, 18: 192, 21: 224, 24: 256}


def generate_mnemonic(num_words: int = 12) -> str:
    try:
        strength = _WORDS_TO_STRENGTH[num_words]
    except KeyError:
        raise ValueError(f"num_words must be one of {sorted(_WORDS_TO_STRENGTH)}") from None
    return Mnemonic("english").generate(strength=strength)


def is_valid_mnemonic(phrase: str) -> bool:
    return bool(Mnemonic("english").check(" ".join(phrase.split())))


def address_from_mnemonic(mnemonic: str, path: str = ETH_DERIVATION_PATH) -> str:
    """Raises ValueError for a phrase that is not valid English BIP-39."""
    if not is_valid_mnemonic(mnemonic):
        raise ValueError("Invalid BIP-39 mnemonic phrase")
    return Account.from_mnemonic(" ".join(mnemonic.split()), account_path=path).address


async def address_from_mnemonic_async(mnemonic: str, path: str = ETH_DERIVATION_PATH) -> str:
    # PBKDF2 seed stretching is CPU bound; keep it off the event loop.
    return await asyncio.to_thread(address_from_mnemonic, mnemonic, path)


__all__ = [
    "ETH_DERIVATION_PATH",
    "generate_mnemonic",
    "is_valid_mnemonic",
    "address_from_mnemonic",
    "address_from_mnemonic_async",
]
