"""
adawallet CLI - Inspect, fee-estimate and verify Byron transactions, check address usage.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import httpx
import typer
from loguru import logger

from adawallet.backends.base import ExplorerError
from adawallet.backends.explorer import create_explorer
from adawallet.config import PROTOCOL_MAGICS, Settings, get_settings
from adawallet.fees import estimate_fee, estimate_signed_fee
from adawallet.transaction import (
    SignedTransaction,
    TransactionError,
    TxInput,
    TxOutput,
    TxWitness,
    UnsignedTransaction,
)
from adawallet.wallet.address import is_valid_address

app = typer.Typer(
    name="adawallet",
    help="Cardano (Byron) wallet transaction tools",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def load_transaction(document: dict[str, Any]) -> SignedTransaction:
    """
    Build a transaction from its JSON document.

    {
        "inputs": [{"txid": "<hex>", "index": 0}],
        "outputs": [{"address": "<base58>", "amount": 1000000}],
        "attributes": {},
        "witnesses": [{"public_key": "<hex>", "signature": "<hex>"}]
    }

    "witnesses" may be omitted for an unsigned transaction.
    """
    try:
        tx = UnsignedTransaction(
            inputs=[TxInput(i["txid"], int(i["index"])) for i in document.get("inputs", [])],
            outputs=[
                TxOutput(o["address"], int(o["amount"])) for o in document.get("outputs", [])
            ],
            attributes=document.get("attributes", {}),
        )
        witnesses = [
            TxWitness(w["public_key"], w["signature"]) for w in document.get("witnesses", [])
        ]
    except KeyError as e:
        raise TransactionError(f"Missing field in transaction document: {e}") from e

    return SignedTransaction(tx, witnesses)


def _read_document(path: Path) -> SignedTransaction:
    if not path.exists():
        logger.error(f"Transaction file not found: {path}")
        raise typer.Exit(1)

    try:
        return load_transaction(json.loads(path.read_text()))
    except (json.JSONDecodeError, TransactionError) as e:
        logger.error(f"Invalid transaction document: {e}")
        raise typer.Exit(1) from e


@app.command()
def inspect(
    tx_file: Path = typer.Argument(..., help="Transaction JSON document"),
    network: str = typer.Option(None, "--network", "-n", help="mainnet | testnet"),
    log_level: str = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Show id, fee, verification result and CBOR hex of a transaction."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    if network:
        if network not in PROTOCOL_MAGICS:
            logger.error(f"Unknown network: {network}")
            raise typer.Exit(1)
        settings = settings.model_copy(update={"network": network})

    signed = _read_document(tx_file)
    verified = signed.verify(protocol_magic=settings.get_protocol_magic())

    print(f"Tx id: {signed.get_id()}")
    print(f"Tx fee: {estimate_fee(signed, settings.fee_params())}")
    print(f"Witnesses: {len(signed.witnesses)}")
    print(f"Verified: {verified}")
    print(f"CBOR: {signed.to_hex()}")

    if not verified:
        raise typer.Exit(2)


@app.command()
def fee(
    tx_file: Path = typer.Argument(..., help="Transaction JSON document"),
    log_level: str = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Estimate the fee; unsigned documents are priced with one witness per input."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    signed = _read_document(tx_file)
    if signed.witnesses:
        amount = estimate_fee(signed, settings.fee_params())
    else:
        amount = estimate_signed_fee(signed.transaction, params=settings.fee_params())

    print(amount)


@app.command()
def used(
    addresses: list[str] = typer.Argument(..., help="Byron addresses"),
    log_level: str = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Report which addresses have transaction history on the explorer."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    for address in addresses:
        if not is_valid_address(address):
            logger.error(f"Invalid address: {address}")
            raise typer.Exit(1)

    try:
        used_addresses = asyncio.run(_filter_used(settings, addresses))
    except (ExplorerError, httpx.HTTPError) as e:
        logger.error(f"Explorer query failed: {e}")
        raise typer.Exit(1) from e

    for address in addresses:
        print(f"{address} {'used' if address in used_addresses else 'unused'}")


async def _filter_used(settings: Settings, addresses: list[str]) -> set[str]:
    explorer = create_explorer(settings)
    try:
        return await explorer.filter_used_addresses(addresses)
    finally:
        await explorer.close()


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
