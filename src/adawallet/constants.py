"""
Cardano (Byron) protocol constants.

The linear fee coefficients and protocol magics are network parameters.
They are the defaults for adawallet.config.Settings and can be overridden
from the environment.
"""

from __future__ import annotations

# Protocol magic baked into every transaction signature message
MAINNET_PROTOCOL_MAGIC = 764824073
TESTNET_PROTOCOL_MAGIC = 1097911063

# Byron linear fee: fee = a + b * size_in_bytes (lovelace)
DEFAULT_FEE_A = 155381
DEFAULT_FEE_B = "43.946"

# Signature domain tag for transaction witnesses
TX_SIGNATURE_TAG = 0x01

# BIP32 hardened index offset
HARDENED_THRESHOLD = 0x80000000

# BIP44 purpose and Cardano coin type
BIP44_PURPOSE = 44
CARDANO_COIN_TYPE = 1815

DEFAULT_GAP_LIMIT = 20

# Nonce used by Byron v1 addresses to encrypt the derivation path payload
HD_PASSPHRASE_NONCE = b"serokellfore"
