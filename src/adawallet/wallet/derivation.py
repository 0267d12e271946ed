"""
HD derivation paths, derivation schemes and Byron address generation.

Scheme v1 (legacy Daedalus): m/0'/{index}', address carries the encrypted path.
Scheme v2 (BIP44): m/44'/1815'/{account}'/{change}/{index}
- change: 0 (external/receive), 1 (internal/change)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from adawallet.constants import BIP44_PURPOSE, CARDANO_COIN_TYPE, HARDENED_THRESHOLD
from adawallet.wallet.address import pack_address
from adawallet.wallet.models import DerivedAddress

if TYPE_CHECKING:
    from adawallet.providers.base import KeyProvider

DerivationPath = tuple[int, ...]


def harden(index: int) -> int:
    return index + HARDENED_THRESHOLD


def is_hardened(index: int) -> bool:
    return index >= HARDENED_THRESHOLD


def to_bip32_string_path(path: Sequence[int]) -> str:
    """Render a path as e.g. m/44'/1815'/0'/0/3"""
    parts = ["m"]
    for index in path:
        if is_hardened(index):
            parts.append(f"{index - HARDENED_THRESHOLD}'")
        else:
            parts.append(str(index))
    return "/".join(parts)


def _v1_absolute_path(relative: Sequence[int]) -> DerivationPath:
    # Legacy wallets have a single account and no change chain
    *_, address_index = relative
    return (HARDENED_THRESHOLD, address_index)


def _v2_absolute_path(relative: Sequence[int]) -> DerivationPath:
    account, change, address_index = relative
    return (
        harden(BIP44_PURPOSE),
        harden(CARDANO_COIN_TYPE),
        harden(account),
        change,
        address_index,
    )


@dataclass(frozen=True)
class DerivationScheme:
    type: str
    number: int
    start_address_index: int
    requires_hd_passphrase: bool
    path_builder: Callable[[Sequence[int]], DerivationPath]

    def to_absolute_derivation_path(self, relative: Sequence[int]) -> DerivationPath:
        """Absolute path from (account, change, address_index)."""
        return self.path_builder(relative)


DERIVATION_SCHEME_V1 = DerivationScheme(
    type="v1",
    number=1,
    start_address_index=HARDENED_THRESHOLD,
    requires_hd_passphrase=True,
    path_builder=_v1_absolute_path,
)

DERIVATION_SCHEME_V2 = DerivationScheme(
    type="v2",
    number=2,
    start_address_index=0,
    requires_hd_passphrase=False,
    path_builder=_v2_absolute_path,
)


class ByronAddressGenerator:
    """
    Derives the Byron address at a local index of one account chain.

    The HD passphrase, when the provider's scheme needs one, is fetched on
    first use and reused for every later address.
    """

    def __init__(self, provider: KeyProvider, account_index: int, is_change: bool):
        self.provider = provider
        self.account_index = account_index
        self.is_change = is_change
        self._hd_passphrase: bytes | None = None
        self._passphrase_lock = asyncio.Lock()

    async def _get_hd_passphrase(self) -> bytes:
        # Addresses of one block are derived concurrently; ask the provider once
        async with self._passphrase_lock:
            if self._hd_passphrase is None:
                self._hd_passphrase = await self.provider.get_hd_passphrase()
        return self._hd_passphrase

    async def __call__(self, index: int) -> DerivedAddress:
        scheme = self.provider.get_derivation_scheme()

        path = scheme.to_absolute_derivation_path(
            [self.account_index, 1 if self.is_change else 0, index + scheme.start_address_index]
        )
        xpub = await self.provider.derive_xpub(path)
        hd_passphrase = await self._get_hd_passphrase() if scheme.requires_hd_passphrase else None

        address = pack_address(path, xpub, hd_passphrase, scheme.number)
        return DerivedAddress(path=path, address=address)
