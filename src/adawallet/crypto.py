"""
Cryptographic primitives for adawallet.

Hashing and signature verification are exposed as small service objects so
the transaction model can be handed deterministic stand-ins in tests.
"""

from __future__ import annotations

import hashlib
from typing import Any, Protocol

import libnacl

from adawallet import codec

ED25519_PUBLIC_KEY_SIZE = 32
ED25519_SIGNATURE_SIZE = 64


def blake2b_224(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=28).digest()


def blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def sha3_256(data: bytes) -> bytes:
    return hashlib.sha3_256(data).digest()


class Hasher(Protocol):
    def digest(self, data: bytes) -> bytes: ...


class Blake2bHasher:
    """Unkeyed blake2b-256, the Byron object hash."""

    def digest(self, data: bytes) -> bytes:
        return blake2b_256(data)


DEFAULT_HASHER = Blake2bHasher()


def hash_object(value: Any, hasher: Hasher | None = None) -> str:
    """Hex digest of the canonical CBOR encoding of ``value``."""
    hasher = hasher or DEFAULT_HASHER
    return hasher.digest(codec.encode(value)).hex()


class SignatureVerifier(Protocol):
    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool: ...


class Ed25519Verifier:
    """
    Ed25519 verification via libsodium.

    Witness keys are extended public keys (32-byte point followed by a 32-byte
    chain code); only the point takes part in verification.
    """

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        try:
            if len(signature) != ED25519_SIGNATURE_SIZE:
                return False
            verify_key = public_key[:ED25519_PUBLIC_KEY_SIZE]
            libnacl.crypto_sign_verify_detached(signature, message, verify_key)
            return True
        except Exception:
            return False


DEFAULT_VERIFIER = Ed25519Verifier()
