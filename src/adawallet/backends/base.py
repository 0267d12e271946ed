"""
Base blockchain explorer interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adawallet.transaction import SignedTransaction


class ExplorerError(Exception):
    """Explorer answered, but reported an error"""

    pass


class BlockchainExplorer(ABC):
    """
    Abstract address-usage oracle.

    Errors must be raised, never reported as "unused": address discovery
    relies on the answer to decide where the gap starts.
    """

    @abstractmethod
    async def is_some_address_used(self, addresses: Iterable[str]) -> bool:
        """True if any of the addresses has on-chain history"""

    @abstractmethod
    async def filter_used_addresses(self, addresses: Iterable[str]) -> set[str]:
        """Subset of addresses with on-chain history"""

    @abstractmethod
    async def submit_transaction(self, signed: SignedTransaction) -> str:
        """Broadcast a signed transaction, returns txid"""

    async def close(self) -> None:
        """Close explorer connection"""
        pass
