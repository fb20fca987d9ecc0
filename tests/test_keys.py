from __future__ import annotations

import hashlib

import pytest

from railgun_wallet_service.errors import KeyDerivationError
from railgun_wallet_service.services.keys import (
    SALT_BYTES,
    compute_password_hash,
    decode_salt,
    derive_key,
    scrypt_hex,
)

SALT_HEX = "00112233445566778899aabbccddeeff"


def _reference(password: str, salt_hex: str, length: int = 32) -> str:
    return hashlib.scrypt(
        password.encode("utf-8"), salt=bytes.fromhex(salt_hex), n=16384, r=8, p=1, maxmem=32 * 1024 * 1024, dklen=length
    ).hex()


@pytest.mark.asyncio
async def test_derive_key_default_length_is_32_bytes():
    key = await derive_key("correct horse")
    assert len(key.key_hex) == 64
    int(key.key_hex, 16)
    assert len(bytes.fromhex(key.salt_hex)) == SALT_BYTES


@pytest.mark.asyncio
async def test_derive_key_random_salt_differs_per_call():
    a = await derive_key("same password")
    b = await derive_key("same password")
    assert a.salt_hex != b.salt_hex
    assert a.key_hex != b.key_hex


@pytest.mark.asyncio
async def test_derive_key_with_salt_matches_node_default_scrypt():
    key = await derive_key("hunter2", 32, SALT_HEX)
    assert key.salt_hex == SALT_HEX
    assert key.key_hex == _reference("hunter2", SALT_HEX)


@pytest.mark.asyncio
async def test_derive_key_is_deterministic_for_fixed_salt_and_accepts_0x():
    a = await derive_key("pw", 32, SALT_HEX)
    b = await derive_key("pw", 32, "0x" + SALT_HEX)
    assert a.key_hex == b.key_hex


@pytest.mark.asyncio
async def test_custom_output_length():
    key = await derive_key("pw", 16, SALT_HEX)
    assert len(key.key_hex) == 32
    assert key.key_hex == _reference("pw", SALT_HEX, 16)


@pytest.mark.asyncio
async def test_compute_password_hash_returns_hex_only():
    assert await compute_password_hash("pw", 32, SALT_HEX) == _reference("pw", SALT_HEX)


def test_password_is_used_verbatim():
    salt = bytes.fromhex(SALT_HEX)
    assert scrypt_hex(" pw ", salt) != scrypt_hex("pw", salt)


def test_unicode_password_is_utf8_encoded():
    assert scrypt_hex("pässwörd", bytes.fromhex(SALT_HEX)) == _reference("pässwörd", SALT_HEX)


def test_invalid_salt_hex_raises():
    with pytest.raises(KeyDerivationError) as ei:
        decode_salt("zz-not-hex")
    assert ei.value.status_code == 500
    assert "Invalid salt hex" in ei.value.message


def test_non_positive_length_raises():
    with pytest.raises(KeyDerivationError):
        scrypt_hex("pw", b"salt", 0)


def test_repr_does_not_leak_key():
    from railgun_wallet_service.services.keys import DerivedKey

    k = DerivedKey(key_hex="ab" * 32, salt_hex=SALT_HEX)
    assert "ab" * 32 not in repr(k)


@pytest.mark.asyncio
async def test_empty_salt_is_treated_as_absent():
    a = await derive_key("pw", 32, "")
    b = await derive_key("pw", 32, "")
    assert len(bytes.fromhex(a.salt_hex)) == SALT_BYTES
    assert a.salt_hex != b.salt_hex
    assert a.key_hex != b.key_hex


def test_zero_length_decoded_salt_is_rejected():
    with pytest.raises(KeyDerivationError):
        decode_salt("0x")


@pytest.mark.asyncio
async def test_different_salts_give_different_keys():
    a = await derive_key("pw", 32, SALT_HEX)
    b = await derive_key("pw", 32, "ff" * 16)
    assert a.key_hex != b.key_hex
