"""
Password → encryption key derivation.

scrypt with the cost parameters Node's ``crypto.scrypt`` uses by default,
so keys match the ones produced by the engine's own tooling:

    scrypt(password=UTF-8(password), salt, N=16384, r=8, p=1, dkLen=32)

When no salt is supplied a fresh 16-byte one is drawn, so two calls without
a salt never agree. The salt actually used is returned alongside the key.

The KDF is deliberately slow; :func:`derive_key` runs it on a worker thread
so the event loop keeps serving other requests.
"""

from __future__ import annotations

import asyncio
import hashlib
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from ..errors import KeyDerivationError
from ..logging import get_logger

log = get_logger(__name__)

SALT_BYTES = 16
DEFAULT_KEY_LENGTH = 32

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_MAXMEM = 32 * 1024 * 1024


@dataclass(frozen=True)
class DerivedKey:
    key_hex: str
    salt_hex: str

    def __repr__(self) -> str:
        return f"DerivedKey(len={len(self.key_hex) // 2}, salt={self.salt_hex})"


def new_salt() -> bytes:
    return secrets.token_bytes(SALT_BYTES)


def decode_salt(salt_hex: str) -> bytes:
    s = salt_hex.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    try:
        salt = bytes.fromhex(s)
    except ValueError as e:
        raise KeyDerivationError(f"Invalid salt hex: {e}") from e
    if not salt:
        raise KeyDerivationError("Invalid salt hex: salt is empty")
    return salt


def scrypt_hex(password: str, salt: bytes, output_length: int = DEFAULT_KEY_LENGTH) -> str:
    if output_length <= 0:
        raise KeyDerivationError(f"output length must be positive, got {output_length}")
    try:
        key = hashlib.scrypt(
            password.encode("utf-8"),
            salt=salt,
            n=SCRYPT_N,
            r=SCRYPT_R,
            p=SCRYPT_P,
            maxmem=SCRYPT_MAXMEM,
            dklen=output_length,
        )
    except (ValueError, MemoryError) as e:
        raise KeyDerivationError(f"scrypt failed: {e}") from e
    return key.hex()


async def derive_key(
    password: str,
    output_length: int = DEFAULT_KEY_LENGTH,
    salt_hex: Optional[str] = None,
) -> DerivedKey:
    """
    Derive an ``output_length``-byte key from ``password``.

    ``salt_hex`` may carry a ``0x`` prefix; when omitted or empty a random
    salt is used.
    Raises KeyDerivationError on malformed salt or KDF/entropy failure.
    """
    if salt_hex:
        salt = decode_salt(salt_hex)
    else:
        try:
            salt = new_salt()
        except OSError as e:
            raise KeyDerivationError(f"Unable to gather entropy for salt: {e}") from e

    started = time.perf_counter()
    key_hex = await asyncio.to_thread(scrypt_hex, password, salt, output_length)
    log.debug("kdf.derived", length=output_length, elapsed_ms=round((time.perf_counter() - started) * 1e3, 1))
    return DerivedKey(key_hex=key_hex, salt_hex=salt.hex())


async def compute_password_hash(
    password: str,
    output_length: int = DEFAULT_KEY_LENGTH,
    salt_hex: Optional[str] = None,
) -> str:
    """Hex-only form of :func:`derive_key`."""
    return (await derive_key(password, output_length, salt_hex)).key_hex


__all__ = [
    "DerivedKey",
    "SALT_BYTES",
    "DEFAULT_KEY_LENGTH",
    "decode_salt",
    "scrypt_hex",
    "derive_key",
    "compute_password_hash",
]
