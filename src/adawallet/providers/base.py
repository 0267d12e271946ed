"""
Key-derivation capability interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adawallet.transaction import TxWitness
    from adawallet.wallet.derivation import DerivationPath, DerivationScheme


class KeyProviderError(Exception):
    pass


class KeyProvider(ABC):
    """
    Source of extended public keys and signatures.

    Implementations wrap a software keystore or a hardware device. Calls may
    involve I/O or user confirmation on the device; failures (disconnect,
    user rejection) are raised to the caller unchanged.
    """

    @abstractmethod
    def get_derivation_scheme(self) -> DerivationScheme:
        """Derivation scheme of the wallet behind this provider"""

    @abstractmethod
    async def derive_xpub(self, path: DerivationPath) -> bytes:
        """Extended public key (32-byte key + 32-byte chain code) at path"""

    async def get_hd_passphrase(self) -> bytes:
        """
        Wallet-wide secret used by v1 addresses to encrypt derivation paths.

        Providers on the v1 scheme override this; the rest have no passphrase
        and raise KeyProviderError.
        """
        raise KeyProviderError(f"{type(self).__name__} has no HD passphrase")

    @abstractmethod
    async def sign(self, message: bytes, path: DerivationPath) -> TxWitness:
        """Sign message with the key at path, returning the witness"""

    async def close(self) -> None:
        """Release the underlying keystore or device"""
        pass
