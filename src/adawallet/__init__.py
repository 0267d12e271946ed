"""
adawallet - Cardano (Byron) HD wallet core

Provides address discovery, transaction encoding, fees, signing and verification.
"""

__version__ = "0.3.0"

from adawallet.codec import CodecError, IndefiniteList
from adawallet.config import AddressManagerConfig, Settings
from adawallet.fees import FeeParams, estimate_fee, estimate_signed_fee
from adawallet.transaction import (
    SignedTransaction,
    TransactionError,
    TxInput,
    TxOutput,
    TxWitness,
    UnsignedTransaction,
    sign_transaction,
    tx_signature_message,
    verify_transaction,
)
from adawallet.wallet import AddressManager

__all__ = [
    "AddressManager",
    "AddressManagerConfig",
    "CodecError",
    "FeeParams",
    "IndefiniteList",
    "Settings",
    "SignedTransaction",
    "TransactionError",
    "TxInput",
    "TxOutput",
    "TxWitness",
    "UnsignedTransaction",
    "estimate_fee",
    "estimate_signed_fee",
    "sign_transaction",
    "tx_signature_message",
    "verify_transaction",
]
