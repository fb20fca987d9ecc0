"""
Poseidon hash over the BN254 scalar field, computed by the engine.

The sponge itself is opaque; this wrapper only normalizes inputs the way
the engine's hash package expects: values above the field modulus are
reduced, everything is sent as unprefixed lowercase hex, and the hex digest
is returned as an int.
"""

from __future__ import annotations

from typing import Iterable, List

from .interface import WalletEngine

SCALAR_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617


def to_field_hex(value: int) -> str:
    if value < 0:
        raise ValueError(f"field elements must be non-negative, got {value}")
    if value > SCALAR_FIELD:
        value %= SCALAR_FIELD
    return format(value, "x")


def encode_inputs(inputs: Iterable[int]) -> List[str]:
    return [to_field_hex(int(v)) for v in inputs]


async def poseidon(engine: WalletEngine, inputs: Iterable[int]) -> int:
    digest = await engine.poseidon_hex(encode_inputs(inputs))
    digest = digest[2:] if digest.startswith(("0x", "0X")) else digest
    return int(digest, 16)


__all__ = ["SCALAR_FIELD", "to_field_hex", "encode_inputs", "poseidon"]
