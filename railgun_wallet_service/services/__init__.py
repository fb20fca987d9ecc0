"""
railgun_wallet_service.services
===============================

Service layer behind the HTTP handlers.

Public submodules
-----------------
- keys      : scrypt password → encryption key (DerivedKey)
- accounts  : BIP-39 mnemonic generation and public address derivation
- wallet    : derive_and_verify, the double-derivation protocol
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["keys", "accounts", "wallet"]


def __getattr__(name: str):
    if name in __all__:
        return import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:  # pragma: no cover
    from . import accounts as accounts
    from . import keys as keys
    from . import wallet as wallet
