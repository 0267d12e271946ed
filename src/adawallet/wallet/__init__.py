"""
Wallet address derivation and discovery.
"""

from adawallet.wallet.address import AddressError, decode_address, pack_address
from adawallet.wallet.address_manager import AddressManager, create_account_address_managers
from adawallet.wallet.derivation import (
    DERIVATION_SCHEME_V1,
    DERIVATION_SCHEME_V2,
    ByronAddressGenerator,
    DerivationPath,
    DerivationScheme,
    to_bip32_string_path,
)
from adawallet.wallet.models import AddressInfo, DerivedAddress

__all__ = [
    "AddressError",
    "AddressInfo",
    "AddressManager",
    "ByronAddressGenerator",
    "DERIVATION_SCHEME_V1",
    "DERIVATION_SCHEME_V2",
    "DerivationPath",
    "DerivationScheme",
    "DerivedAddress",
    "create_account_address_managers",
    "decode_address",
    "pack_address",
    "to_bip32_string_path",
]
