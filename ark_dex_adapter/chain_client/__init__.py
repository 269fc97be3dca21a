"""
Ark chain API client package.
"""

from ark_dex_adapter.chain_client.client import (
    ORDER_ASC,
    ORDER_DESC,
    ChainClient,
    is_not_found,
)

__all__ = ["ORDER_ASC", "ORDER_DESC", "ChainClient", "is_not_found"]
