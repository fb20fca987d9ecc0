"""
Admin CLI for the Railgun Wallet Service.

Utilities:
  - serve         : run the HTTP service (same as railgun-wallet-service)
  - derive-key    : run the password KDF and print key + salt
  - new-mnemonic  : print a fresh BIP-39 phrase
  - address       : print the public address for a mnemonic
  - poseidon      : hash integers through the engine sidecar
  - config        : print the effective configuration (secrets redacted)

Usage:
  railgun-wallet <command> [options]
"""

from __future__ import annotations

import asyncio
import json
from typing import List, Optional

import typer

from .config import load_config
from .engine.bridge import BridgeConfig, BridgeEngine, EngineError
from .engine.poseidon import poseidon
from .services.accounts import ETH_DERIVATION_PATH, address_from_mnemonic, generate_mnemonic
from .services.keys import DEFAULT_KEY_LENGTH, derive_key
from .errors import KeyDerivationError
from .logging import setup_logging

app = typer.Typer(add_completion=False, help="Railgun Wallet Service - Admin CLI")


@app.callback()
def main_callback():
    # Log records go to stderr; stdout carries only command output.
    setup_logging(level=load_config().log_level)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Enable autoreload (dev only)"),
):
    """Run the HTTP service."""
    from .main import main as run_main

    argv: List[str] = []
    if host:
        argv += ["--host", host]
    if port:
        argv += ["--port", str(port)]
    if reload:
        argv.append("--reload")
    run_main(argv)


@app.command("derive-key")
def derive_key_cmd(
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, help="Password to stretch"),
    salt: Optional[str] = typer.Option(None, "--salt", help="Hex salt (random when omitted)"),
    length: int = typer.Option(DEFAULT_KEY_LENGTH, "--length", "-l", help="Output length in bytes"),
):
    """Derive an encryption key the same way the wallet endpoints do."""
    try:
        key = asyncio.run(derive_key(password, length, salt))
    except KeyDerivationError as e:
        typer.secho(f"error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"key": key.key_hex, "salt": key.salt_hex}, indent=2))


@app.command("new-mnemonic")
def new_mnemonic(
    words: int = typer.Option(12, "--words", "-w", help="Phrase length: 12, 15, 18, 21 or 24"),
):
    """Print a fresh English BIP-39 mnemonic."""
    try:
        typer.echo(generate_mnemonic(words))
    except ValueError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


@app.command("address")
def address(
    mnemonic: str = typer.Argument(..., help="BIP-39 phrase (quote it)"),
    path: str = typer.Option(ETH_DERIVATION_PATH, "--path", help="HD derivation path"),
):
    """Print the EIP-55 address the wallet endpoints report as publicAddress."""
    try:
        typer.echo(address_from_mnemonic(mnemonic, path))
    except ValueError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("poseidon")
def poseidon_cmd(
    inputs: List[int] = typer.Argument(..., help="Non-negative integers to hash"),
    url: Optional[str] = typer.Option(None, "--url", help="Engine sidecar URL (default: ENGINE_BRIDGE_URL)"),
):
    """Hash integers with the engine's Poseidon implementation."""
    cfg = load_config()

    async def _run() -> int:
        bridge_cfg = BridgeConfig(url=url or cfg.engine_bridge_url, timeout_s=cfg.engine_call_timeout_s)
        async with BridgeEngine(bridge_cfg) as engine:
            return await poseidon(engine, inputs)

    try:
        digest = asyncio.run(_run())
    except (ValueError, EngineError) as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(str(digest))


@app.command("config")
def show_config():
    """Print the effective configuration as JSON."""
    cfg = load_config()
    data = cfg.model_dump(mode="json")
    data["default_password"] = "***"
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
