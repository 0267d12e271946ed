"""
Byron transaction model: inputs, outputs, witnesses, ids and signatures.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cbor2 import CBOREncoder
from loguru import logger

from adawallet import codec
from adawallet.constants import MAINNET_PROTOCOL_MAGIC, TX_SIGNATURE_TAG
from adawallet.crypto import (
    DEFAULT_HASHER,
    DEFAULT_VERIFIER,
    Hasher,
    SignatureVerifier,
)
from adawallet.wallet.address import AddressError, decode_address

if TYPE_CHECKING:
    from adawallet.providers.base import KeyProvider
    from adawallet.wallet.derivation import DerivationPath

TXID_SIZE = 32
WITNESS_KEY_SIZE = 64
WITNESS_SIGNATURE_SIZE = 64

# Witness and input type tag for plain public-key entries
PK_WITNESS_TYPE = 0
UTXO_INPUT_TYPE = 0


class TransactionError(Exception):
    pass


def _require_hex(value: str, size: int, name: str) -> None:
    try:
        raw = bytes.fromhex(value)
    except (TypeError, ValueError) as e:
        raise TransactionError(f"{name} is not valid hex: {value!r}") from e
    if len(raw) != size:
        raise TransactionError(f"{name} must be {size} bytes, got {len(raw)}")


@dataclass(frozen=True)
class TxInput:
    txid: str
    output_index: int

    def __post_init__(self) -> None:
        _require_hex(self.txid, TXID_SIZE, "Input txid")
        if self.output_index < 0:
            raise TransactionError(f"Invalid output index: {self.output_index}")

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.encode(
            [UTXO_INPUT_TYPE, codec.tagged_cbor([bytes.fromhex(self.txid), self.output_index])]
        )


@dataclass(frozen=True)
class TxOutput:
    address: str
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise TransactionError(f"Invalid output amount: {self.amount}")
        try:
            decode_address(self.address)
        except AddressError as e:
            raise TransactionError(f"Invalid output address: {e}") from e

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        # The base58 payload of a Byron address is itself CBOR
        encoder.encode([codec.RawCBOR(decode_address(self.address)), self.amount])


@dataclass(frozen=True)
class TxWitness:
    """Public-key witness: extended public key (64 bytes) and signature (64 bytes), hex."""

    public_key: str
    signature: str

    def __post_init__(self) -> None:
        _require_hex(self.public_key, WITNESS_KEY_SIZE, "Witness public key")
        _require_hex(self.signature, WITNESS_SIGNATURE_SIZE, "Witness signature")

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.encode(
            [
                PK_WITNESS_TYPE,
                codec.tagged_cbor([bytes.fromhex(self.public_key), bytes.fromhex(self.signature)]),
            ]
        )


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Transaction body.

    The id is the hash of the canonical encoding of (inputs, outputs,
    attributes); witnesses never take part in it.
    """

    inputs: Sequence[TxInput]
    outputs: Sequence[TxOutput]
    attributes: Mapping[Any, Any] = field(default_factory=dict, hash=False)
    hasher: Hasher = field(default=DEFAULT_HASHER, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "attributes", dict(self.attributes))

    def get_id(self) -> str:
        return self.hasher.digest(codec.encode(self)).hex()

    def total_output(self) -> int:
        return sum(output.amount for output in self.outputs)

    def with_witnesses(self, witnesses: Sequence[TxWitness]) -> SignedTransaction:
        return SignedTransaction(self, tuple(witnesses))

    def to_hex(self) -> str:
        return codec.encode_hex(self)

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.encode(
            [
                codec.IndefiniteList(self.inputs),
                codec.IndefiniteList(self.outputs),
                self.attributes,
            ]
        )


@dataclass(frozen=True)
class SignedTransaction:
    transaction: UnsignedTransaction
    witnesses: Sequence[TxWitness] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "witnesses", tuple(self.witnesses))

    def get_id(self) -> str:
        return self.transaction.get_id()

    def verify(
        self,
        protocol_magic: int = MAINNET_PROTOCOL_MAGIC,
        verifier: SignatureVerifier | None = None,
    ) -> bool:
        return verify_transaction(self, protocol_magic, verifier)

    def to_hex(self) -> str:
        """Broadcast payload."""
        return codec.encode_hex(self)

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.encode([self.transaction, list(self.witnesses)])


def tx_signature_message(txid: str, protocol_magic: int = MAINNET_PROTOCOL_MAGIC) -> bytes:
    """
    Bytes a witness signs: tag || cbor(protocol_magic) || cbor(txid bytes).

    For mainnet the prefix is 01 1a2d964a09 5820.
    """
    return (
        bytes([TX_SIGNATURE_TAG])
        + codec.encode(protocol_magic)
        + codec.encode(bytes.fromhex(txid))
    )


def verify_transaction(
    signed: SignedTransaction,
    protocol_magic: int = MAINNET_PROTOCOL_MAGIC,
    verifier: SignatureVerifier | None = None,
) -> bool:
    """
    Check every witness against the transaction id.

    A transaction without witnesses verifies as True: the result is the AND
    over an empty set. Callers that need at least one signature per input
    must check the witness count themselves.
    """
    verifier = verifier or DEFAULT_VERIFIER
    message = tx_signature_message(signed.get_id(), protocol_magic)

    for index, witness in enumerate(signed.witnesses):
        try:
            public_key = bytes.fromhex(witness.public_key)
            signature = bytes.fromhex(witness.signature)
        except ValueError:
            logger.debug(f"Witness {index} is not valid hex")
            return False

        if not verifier.verify(message, signature, public_key):
            logger.debug(f"Witness {index} failed verification for tx {signed.get_id()}")
            return False

    return True


async def sign_transaction(
    tx: UnsignedTransaction,
    provider: KeyProvider,
    input_paths: Sequence[DerivationPath],
    protocol_magic: int = MAINNET_PROTOCOL_MAGIC,
) -> SignedTransaction:
    """
    Sign ``tx`` with the keys owning its inputs.

    ``input_paths[i]`` is the derivation path of the address that received
    ``tx.inputs[i]``; one witness is produced per input, in input order.
    """
    if len(input_paths) != len(tx.inputs):
        raise TransactionError(
            f"Expected {len(tx.inputs)} input paths, got {len(input_paths)}"
        )

    message = tx_signature_message(tx.get_id(), protocol_magic)

    witnesses = []
    for path in input_paths:
        witnesses.append(await provider.sign(message, path))

    logger.debug(f"Signed tx {tx.get_id()} with {len(witnesses)} witnesses")
    return SignedTransaction(tx, tuple(witnesses))
