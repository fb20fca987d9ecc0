from __future__ import annotations

"""
Wallet models

- CreateWalletRequest: optional password; the mnemonic is generated server-side.
- LoadWalletRequest: mnemonic + password. Both are declared optional so the
  handler can answer a missing field with a plain 400 instead of a schema error.
- WalletResponse: the derived identity plus the determinism report.

Passwords are used verbatim (whitespace is significant to the KDF) and never
logged.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateWalletRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: Optional[str] = Field(default=None, description="Password protecting the wallet's local state.")


class LoadWalletRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mnemonic: Optional[str] = Field(default=None, description="BIP-39 recovery phrase.")
    password: Optional[str] = Field(default=None, description="Password protecting the wallet's local state.")


class WalletResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    railgun_wallet_id: str = Field(..., alias="railgunWalletID")
    railgun_wallet_address: str = Field(..., alias="railgunWalletAddress")
    public_address: str = Field(..., alias="publicAddress")
    mnemonic: str
    test_results: List[str] = Field(default_factory=list, alias="testResults")
    kdf_salt: Optional[str] = Field(
        default=None,
        alias="kdfSalt",
        description="Hex salt used for the password KDF (only when EXPOSE_KDF_SALT is enabled).",
    )


__all__ = ["CreateWalletRequest", "LoadWalletRequest", "WalletResponse"]
