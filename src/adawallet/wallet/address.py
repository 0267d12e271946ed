"""
Byron address packing.

A Byron address is base58(cbor([tag24(cbor(address_data)), crc32(cbor(address_data))]))
where address_data = [root, attributes, address_type] and root commits to the
extended public key and the attributes.
"""

from __future__ import annotations

import zlib
from collections.abc import Sequence

import base58
import libnacl
from cbor2 import CBORTag

from adawallet import codec
from adawallet.constants import HD_PASSPHRASE_NONCE
from adawallet.crypto import blake2b_224, sha3_256

# Address type 0: public key address
PUBKEY_ADDRESS_TYPE = 0
# Attribute key carrying the encrypted derivation path (v1 scheme)
DERIVATION_PATH_ATTRIBUTE = 1

XPUB_SIZE = 64
HD_PASSPHRASE_SIZE = 32


class AddressError(Exception):
    pass


def encrypt_derivation_path(path: Sequence[int], hd_passphrase: bytes) -> bytes:
    """ChaCha20-Poly1305 over the path encoded as an indefinite CBOR array."""
    if len(hd_passphrase) != HD_PASSPHRASE_SIZE:
        raise AddressError(f"HD passphrase must be {HD_PASSPHRASE_SIZE} bytes")

    plaintext = codec.encode(codec.IndefiniteList(path))
    return libnacl.crypto_aead_chacha20poly1305_ietf_encrypt(
        plaintext, b"", HD_PASSPHRASE_NONCE, hd_passphrase
    )


def decrypt_derivation_path(payload: bytes, hd_passphrase: bytes) -> list[int]:
    try:
        plaintext = libnacl.crypto_aead_chacha20poly1305_ietf_decrypt(
            payload, b"", HD_PASSPHRASE_NONCE, hd_passphrase
        )
    except ValueError as e:
        raise AddressError("Derivation path payload does not belong to this wallet") from e
    return list(codec.decode(plaintext))


def _address_attributes(
    path: Sequence[int], hd_passphrase: bytes | None, scheme_number: int
) -> dict[int, bytes]:
    if scheme_number == 1 and len(path) > 0:
        if hd_passphrase is None:
            raise AddressError("Derivation scheme v1 requires an HD passphrase")
        payload = encrypt_derivation_path(path, hd_passphrase)
        return {DERIVATION_PATH_ATTRIBUTE: codec.encode(payload)}
    return {}


def address_root(xpub: bytes, attributes: dict[int, bytes]) -> bytes:
    spending_data = [PUBKEY_ADDRESS_TYPE, [0, xpub], attributes]
    return blake2b_224(sha3_256(codec.encode(spending_data)))


def pack_address(
    path: Sequence[int],
    xpub: bytes,
    hd_passphrase: bytes | None,
    scheme_number: int,
) -> str:
    """
    Pack a Byron address for ``xpub``.

    Scheme 1 (legacy, v1) stores the encrypted derivation path in the
    address attributes; scheme 2 leaves them empty.
    """
    if len(xpub) != XPUB_SIZE:
        raise AddressError(f"Extended public key must be {XPUB_SIZE} bytes, got {len(xpub)}")

    attributes = _address_attributes(path, hd_passphrase, scheme_number)
    root = address_root(xpub, attributes)

    address_data = codec.encode([root, attributes, PUBKEY_ADDRESS_TYPE])
    checksum = zlib.crc32(address_data)

    packed = codec.encode([CBORTag(codec.CBOR_IN_CBOR_TAG, address_data), checksum])
    return base58.b58encode(packed).decode("ascii")


def decode_address(address: str) -> bytes:
    """
    Raw CBOR bytes of a Byron address, after checking its CRC.
    """
    try:
        raw = base58.b58decode(address)
        decoded = codec.decode(raw)
    except (ValueError, codec.CodecError) as e:
        raise AddressError(f"Invalid address {address!r}: {e}") from e

    if (
        not isinstance(decoded, list)
        or len(decoded) != 2
        or not isinstance(decoded[0], CBORTag)
        or decoded[0].tag != codec.CBOR_IN_CBOR_TAG
        or not isinstance(decoded[0].value, bytes)
    ):
        raise AddressError(f"Invalid address structure: {address!r}")

    tagged, checksum = decoded
    if zlib.crc32(tagged.value) != checksum:
        raise AddressError(f"Address checksum mismatch: {address!r}")

    return raw


def address_attributes(address: str) -> dict[int, bytes]:
    """Attributes map of a Byron address."""
    tagged, _ = codec.decode(decode_address(address))
    _, attributes, _ = codec.decode(tagged.value)
    return dict(attributes)


def is_valid_address(address: str) -> bool:
    try:
        decode_address(address)
    except AddressError:
        return False
    return True
