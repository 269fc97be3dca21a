"""
Multisig DEX wallet resolution and caching.
"""

from ark_dex_adapter.multisig.resolver import (
    MultisigResolver,
    MultisigWalletInfo,
    multisig_attributes,
    wallet_info_from_account,
)

__all__ = [
    "MultisigResolver",
    "MultisigWalletInfo",
    "multisig_attributes",
    "wallet_info_from_account",
]
