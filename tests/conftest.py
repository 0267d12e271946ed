"""
Pytest configuration and fixtures for adawallet tests.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from collections.abc import Iterable

import libnacl
import pytest

from adawallet.backends.base import BlockchainExplorer
from adawallet.providers.base import KeyProvider
from adawallet.transaction import SignedTransaction, TxInput, TxOutput, TxWitness
from adawallet.wallet.address import pack_address
from adawallet.wallet.derivation import DERIVATION_SCHEME_V2, DerivationScheme


def _path_seed(path: tuple[int, ...], size: int) -> bytes:
    return hashlib.blake2b(repr(tuple(path)).encode(), digest_size=size).digest()


class StubKeyProvider(KeyProvider):
    """
    Deterministic provider: the key at a path is seeded from the path itself.
    """

    def __init__(
        self,
        scheme: DerivationScheme = DERIVATION_SCHEME_V2,
        hd_passphrase: bytes = b"\x42" * 32,
    ):
        self.scheme = scheme
        self.hd_passphrase = hd_passphrase
        self.xpub_calls: Counter[tuple[int, ...]] = Counter()
        self.passphrase_calls = 0
        self.sign_calls: list[tuple[int, ...]] = []

    def get_derivation_scheme(self) -> DerivationScheme:
        return self.scheme

    def keypair(self, path: tuple[int, ...]) -> tuple[bytes, bytes]:
        return libnacl.crypto_sign_seed_keypair(_path_seed(path, 32))

    def xpub(self, path: tuple[int, ...]) -> bytes:
        public_key, _ = self.keypair(path)
        chain_code = _path_seed(path + (0xFFFFFFFF,), 32)
        return public_key + chain_code

    async def derive_xpub(self, path: tuple[int, ...]) -> bytes:
        self.xpub_calls[tuple(path)] += 1
        return self.xpub(path)

    async def get_hd_passphrase(self) -> bytes:
        self.passphrase_calls += 1
        return self.hd_passphrase

    async def sign(self, message: bytes, path: tuple[int, ...]) -> TxWitness:
        self.sign_calls.append(tuple(path))
        _, secret_key = self.keypair(path)
        signature = libnacl.crypto_sign_detached(message, secret_key)
        return TxWitness(public_key=self.xpub(path).hex(), signature=signature.hex())


class StubExplorer(BlockchainExplorer):
    """In-memory usage oracle over a fixed set of used addresses."""

    def __init__(self, used: Iterable[str] = ()):
        self.used = set(used)
        self.queries: list[list[str]] = []
        self.filter_queries: list[list[str]] = []
        self.submitted: list[SignedTransaction] = []

    async def is_some_address_used(self, addresses: Iterable[str]) -> bool:
        addresses = list(addresses)
        self.queries.append(addresses)
        return any(address in self.used for address in addresses)

    async def filter_used_addresses(self, addresses: Iterable[str]) -> set[str]:
        addresses = list(addresses)
        self.filter_queries.append(addresses)
        return {address for address in addresses if address in self.used}

    async def submit_transaction(self, signed: SignedTransaction) -> str:
        self.submitted.append(signed)
        return signed.get_id()


@pytest.fixture
def key_provider() -> StubKeyProvider:
    return StubKeyProvider()


@pytest.fixture
def explorer() -> StubExplorer:
    return StubExplorer()


@pytest.fixture
def sample_addresses(key_provider: StubKeyProvider) -> list[str]:
    """Two valid v2 Byron addresses"""
    paths = [(0x8000002C, 0x80000717, 0x80000000, 0, i) for i in range(2)]
    return [pack_address(p, key_provider.xpub(p), None, 2) for p in paths]


@pytest.fixture
def sample_inputs() -> list[TxInput]:
    return [
        TxInput("308244be8550aea4780e527a377cafbf62bb20f899c8b528c569daa43a6c0544", 1),
        TxInput("2b051e692725c5319eb438ee48e8bfa0b7448edf7045d732f3148b6875963103", 1),
        TxInput("68768ab60f52b0b9b3b4bd84160b2700fad32a0da35b21755cf52273d41451a5", 0),
    ]


@pytest.fixture
def sample_outputs(sample_addresses: list[str]) -> list[TxOutput]:
    return [
        TxOutput(sample_addresses[0], 115078),
        TxOutput(sample_addresses[1], 3100719),
    ]
