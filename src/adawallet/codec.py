"""
Canonical CBOR encoding for Byron transaction structures.

Values that know their own wire layout expose ``encode_cbor(encoder)``; the
``default`` hook hands them the live cbor2 encoder so they can emit nested
structures, pre-encoded bytes or indefinite-length arrays directly into the
stream. Nothing is re-ordered: maps are written in insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import cbor2
from cbor2 import CBOREncoder, CBORTag

# Tag 24: "encoded CBOR data item"
CBOR_IN_CBOR_TAG = 24

INDEFINITE_ARRAY_START = b"\x9f"
BREAK = b"\xff"


class CodecError(Exception):
    pass


class IndefiniteList:
    """A sequence written as an indefinite-length CBOR array."""

    def __init__(self, items: Iterable[Any]):
        self.items = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.write(INDEFINITE_ARRAY_START)
        for item in self.items:
            encoder.encode(item)
        encoder.write(BREAK)


class RawCBOR:
    """Bytes that are already a complete CBOR data item, written verbatim."""

    def __init__(self, data: bytes):
        self.data = data

    def encode_cbor(self, encoder: CBOREncoder) -> None:
        encoder.write(self.data)


def tagged_cbor(value: Any) -> CBORTag:
    """Wrap ``value`` as tag 24 around its own encoding."""
    return CBORTag(CBOR_IN_CBOR_TAG, encode(value))


def _default_encoder(encoder: CBOREncoder, value: Any) -> None:
    encode_cbor = getattr(value, "encode_cbor", None)
    if encode_cbor is None:
        raise CodecError(f"Cannot encode value of type {type(value).__name__}")
    encode_cbor(encoder)


def encode(value: Any) -> bytes:
    try:
        return cbor2.dumps(value, default=_default_encoder)
    except CodecError:
        raise
    except cbor2.CBOREncodeError as e:
        raise CodecError(f"Failed to encode value: {e}") from e


def encode_hex(value: Any) -> str:
    return encode(value).hex()


def decode(data: bytes) -> Any:
    """Decode a CBOR item (indefinite arrays come back as plain lists)."""
    try:
        return cbor2.loads(data)
    except cbor2.CBORDecodeError as e:
        raise CodecError(f"Failed to decode CBOR: {e}") from e
