"""
Key provider interfaces.
"""

from adawallet.providers.base import KeyProvider, KeyProviderError

__all__ = ["KeyProvider", "KeyProviderError"]
