"""
Gap-limit address discovery for one account chain.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from adawallet.backends.base import BlockchainExplorer
from adawallet.config import AddressManagerConfig
from adawallet.providers.base import KeyProvider
from adawallet.wallet.derivation import ByronAddressGenerator, DerivationPath, to_bip32_string_path
from adawallet.wallet.models import AddressInfo, DerivedAddress

AddressGenerator = Callable[[int], Awaitable[DerivedAddress]]


def _derive_limiter(config: AddressManagerConfig) -> asyncio.Semaphore | None:
    if config.derive_concurrency is None:
        return None
    return asyncio.Semaphore(config.derive_concurrency)


class AddressManager:
    """
    Derives and discovers the addresses of one account chain.

    Discovery walks the chain in blocks of gap_limit addresses: each block is
    derived concurrently, then the explorer is asked whether any address in
    it was used. The first unused block ends the scan. Blocks are strictly
    sequential, so no address past the first gap is ever derived.

    Derived addresses are cached by local index for the lifetime of the
    manager. Concurrent discovery runs on one manager must be serialized by
    the caller.

    derive_semaphore bounds in-flight derivations across every manager it is
    handed to; create_account_address_managers builds one per provider.
    """

    def __init__(
        self,
        config: AddressManagerConfig,
        provider: KeyProvider,
        explorer: BlockchainExplorer,
        address_generator: AddressGenerator | None = None,
        derive_semaphore: asyncio.Semaphore | None = None,
    ):
        self.config = config
        self.provider = provider
        self.explorer = explorer
        self.address_generator = address_generator or ByronAddressGenerator(
            provider, config.account_index, config.is_change
        )

        self._cache: dict[int, DerivedAddress] = {}
        self._derive_semaphore = (
            derive_semaphore if derive_semaphore is not None else _derive_limiter(config)
        )

    @property
    def gap_limit(self) -> int:
        return self.config.gap_limit

    async def _generate(self, index: int) -> DerivedAddress:
        if self._derive_semaphore is None:
            return await self.address_generator(index)
        async with self._derive_semaphore:
            return await self.address_generator(index)

    async def derive_address(self, index: int) -> str:
        """Address at local index, from the cache when available"""
        if index < 0:
            raise ValueError(f"Invalid address index: {index}")

        if index not in self._cache or self.config.disable_caching:
            self._cache[index] = await self._generate(index)

        return self._cache[index].address

    async def derive_address_block(self, begin_index: int, end_index: int) -> list[str]:
        """Addresses for [begin_index, end_index), derived concurrently, in index order"""
        return list(
            await asyncio.gather(
                *(self.derive_address(index) for index in range(begin_index, end_index))
            )
        )

    async def discover_addresses(self) -> list[str]:
        """
        Gap-limit scan from index 0.

        A fresh account still yields its first block, so callers always get
        gap_limit addresses to hand out.
        """
        addresses: list[str] = []
        begin = 0
        gap_reached = False

        while not gap_reached:
            block = await self.derive_address_block(begin, begin + self.gap_limit)
            gap_reached = not await self.explorer.is_some_address_used(block)

            logger.debug(
                f"Address block [{begin}, {begin + self.gap_limit}) "
                f"{'unused' if gap_reached else 'used'}"
            )

            if not gap_reached or not addresses:
                addresses.extend(block)
            begin += self.gap_limit

        logger.info(
            f"Discovered {len(addresses)} addresses for account {self.config.account_index} "
            f"({'change' if self.config.is_change else 'external'})"
        )
        return addresses

    async def discover_addresses_with_meta(self) -> list[AddressInfo]:
        """Discovered addresses with derivation path and usage flag"""
        addresses = await self.discover_addresses()
        used = await self.explorer.filter_used_addresses(addresses)
        paths = self.get_address_to_path_mapping()

        return [
            AddressInfo(
                address=address,
                path=paths[address],
                bip32_path=to_bip32_string_path(paths[address]),
                is_used=address in used,
            )
            for address in addresses
        ]

    def get_address_to_path_mapping(self) -> dict[str, DerivationPath]:
        """Address -> path for every address derived so far"""
        return {derived.address: derived.path for derived in self._cache.values()}


def create_account_address_managers(
    config: AddressManagerConfig,
    provider: KeyProvider,
    explorer: BlockchainExplorer,
) -> tuple[AddressManager, AddressManager]:
    """
    External and change address managers of one account.

    Both chains derive through the same provider, so derive_concurrency
    applies to the pair: with 1, no two derivations on the device overlap.
    """
    derive_semaphore = _derive_limiter(config)
    external = AddressManager(
        config.model_copy(update={"is_change": False}),
        provider,
        explorer,
        derive_semaphore=derive_semaphore,
    )
    change = AddressManager(
        config.model_copy(update={"is_change": True}),
        provider,
        explorer,
        derive_semaphore=derive_semaphore,
    )
    return external, change
