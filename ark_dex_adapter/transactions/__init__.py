"""
Canonical DEX records and the normalizer turning Ark payloads into them.
"""

from ark_dex_adapter.transactions.identity import (
    DEX_TRANSACTION_ID_LENGTH,
    address_from_public_key,
    compute_dex_transaction_id,
)
from ark_dex_adapter.transactions.models import (
    CanonicalBlock,
    CanonicalTransaction,
    SignaturePacket,
)
from ark_dex_adapter.transactions.normalizer import (
    aggregate_signatures,
    build_signature_packets,
    map_block,
    normalize_transaction,
)

__all__ = [
    "DEX_TRANSACTION_ID_LENGTH",
    "CanonicalBlock",
    "CanonicalTransaction",
    "SignaturePacket",
    "address_from_public_key",
    "aggregate_signatures",
    "build_signature_packets",
    "compute_dex_transaction_id",
    "map_block",
    "normalize_transaction",
]
