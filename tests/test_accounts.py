from __future__ import annotations

import pytest

from railgun_wallet_service.services.accounts import (
    address_from_mnemonic,
    address_from_mnemonic_async,
    generate_mnemonic,
    is_valid_mnemonic,
)

from .conftest import ABANDON_ADDRESS, ABANDON_MNEMONIC


def test_known_vector_address():
    assert address_from_mnemonic(ABANDON_MNEMONIC) == ABANDON_ADDRESS


@pytest.mark.asyncio
async def test_async_address_matches_sync():
    assert await address_from_mnemonic_async(ABANDON_MNEMONIC) == ABANDON_ADDRESS


def test_generate_mnemonic_defaults_to_12_valid_words():
    phrase = generate_mnemonic()
    assert len(phrase.split()) == 12
    assert is_valid_mnemonic(phrase)


@pytest.mark.parametrize("words", [15, 18, 21, 24])
def test_generate_mnemonic_other_lengths(words):
    assert len(generate_mnemonic(words).split()) == words


def test_generate_mnemonic_rejects_odd_length():
    with pytest.raises(ValueError):
        generate_mnemonic(13)


def test_generated_mnemonics_differ():
    assert generate_mnemonic() != generate_mnemonic()


def test_invalid_checksum_is_rejected():
    bad = " ".join(["abandon"] * 12)
    assert not is_valid_mnemonic(bad)
    with pytest.raises(ValueError):
        address_from_mnemonic(bad)
