"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DerivedAddress:
    """Address at a known derivation path"""

    path: tuple[int, ...]
    address: str


@dataclass
class AddressInfo:
    """Discovered address with usage and path metadata"""

    address: str
    path: tuple[int, ...]
    bip32_path: str
    is_used: bool
