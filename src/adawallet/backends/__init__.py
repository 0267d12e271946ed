"""
Blockchain explorer implementations.

Available backends:
- HttpBlockchainExplorer: Cardano SL explorer HTTP API
"""

from adawallet.backends.base import BlockchainExplorer, ExplorerError
from adawallet.backends.explorer import HttpBlockchainExplorer

__all__ = [
    "BlockchainExplorer",
    "ExplorerError",
    "HttpBlockchainExplorer",
]
