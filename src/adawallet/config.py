"""
Configuration for adawallet.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from adawallet.constants import (
    DEFAULT_FEE_A,
    DEFAULT_FEE_B,
    DEFAULT_GAP_LIMIT,
    MAINNET_PROTOCOL_MAGIC,
    TESTNET_PROTOCOL_MAGIC,
)
from adawallet.fees import FeeParams

PROTOCOL_MAGICS = {
    "mainnet": MAINNET_PROTOCOL_MAGIC,
    "testnet": TESTNET_PROTOCOL_MAGIC,
}


class AddressManagerConfig(BaseModel):
    """
    Address discovery parameters for one account chain.

    default_address_count: addresses older wallets derived up front; they
    must fit in the first discovery block to be found again.
    derive_concurrency: max derivations in flight per block (None =
    unbounded, 1 = one at a time for single-access hardware devices).
    """

    account_index: int = Field(default=0, ge=0)
    gap_limit: int = Field(default=DEFAULT_GAP_LIMIT, gt=0)
    default_address_count: int = Field(default=0, ge=0)
    is_change: bool = False
    disable_caching: bool = False
    derive_concurrency: int | None = Field(default=None, gt=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_default_address_count(self) -> AddressManagerConfig:
        if self.default_address_count > self.gap_limit:
            raise ValueError(
                f"Invalid default address count: {self.default_address_count} "
                f"exceeds gap limit {self.gap_limit}"
            )
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ADAWALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    network: Literal["mainnet", "testnet"] = "mainnet"
    # Overrides the network's protocol magic when set
    protocol_magic: int | None = None

    fee_a: Decimal = Decimal(DEFAULT_FEE_A)
    fee_b: Decimal = Decimal(DEFAULT_FEE_B)

    explorer_url: str = "https://explorer.cardano.org"
    explorer_timeout: float = 30.0

    # Default for the CLI --log-level option
    log_level: str = "WARNING"

    def get_protocol_magic(self) -> int:
        if self.protocol_magic is not None:
            return self.protocol_magic
        return PROTOCOL_MAGICS[self.network]

    def fee_params(self) -> FeeParams:
        return FeeParams(a=self.fee_a, b=self.fee_b)


def get_settings() -> Settings:
    return Settings()
