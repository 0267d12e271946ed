"""
Byron linear fee estimation.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from adawallet import codec
from adawallet.constants import DEFAULT_FEE_A, DEFAULT_FEE_B

if TYPE_CHECKING:
    from adawallet.transaction import SignedTransaction, UnsignedTransaction


class FeeParams(BaseModel):
    """Linear fee coefficients: fee = a + b * encoded_size."""

    a: Decimal = Field(default=Decimal(DEFAULT_FEE_A), ge=0)
    b: Decimal = Field(default=Decimal(DEFAULT_FEE_B), gt=0)

    model_config = {"frozen": True}


DEFAULT_FEE_PARAMS = FeeParams()


def fee_for_size(size: int, params: FeeParams | None = None) -> int:
    params = params or DEFAULT_FEE_PARAMS
    return math.ceil(params.a + params.b * size)


def estimate_fee(
    tx: UnsignedTransaction | SignedTransaction, params: FeeParams | None = None
) -> int:
    """
    Fee for the fully encoded transaction.

    Pass the signed transaction to account for the witnesses that go on the
    wire; the unsigned body alone underestimates the final fee.
    """
    return fee_for_size(len(codec.encode(tx)), params)


def estimate_signed_fee(
    tx: UnsignedTransaction,
    witness_count: int | None = None,
    params: FeeParams | None = None,
) -> int:
    """
    Fee of ``tx`` once signed, before the real witnesses exist.

    Placeholder witnesses have the same encoded size as real ones, so the
    estimate matches the fee of the final transaction. Defaults to one
    witness per input.
    """
    from adawallet.transaction import SignedTransaction, TxWitness

    if witness_count is None:
        witness_count = len(tx.inputs)

    placeholder = TxWitness(public_key="00" * 64, signature="00" * 64)
    candidate = SignedTransaction(tx, tuple([placeholder] * witness_count))
    return estimate_fee(candidate, params)
