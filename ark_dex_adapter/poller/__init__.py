"""
Block polling: new Ark blocks published as chainChanges events.
"""

from ark_dex_adapter.poller.block_poller import (
    ADD_BLOCK_EVENT_TYPE,
    BlockPoller,
    PollCursor,
    PollerState,
    add_block_payload,
)

__all__ = [
    "ADD_BLOCK_EVENT_TYPE",
    "BlockPoller",
    "PollCursor",
    "PollerState",
    "add_block_payload",
]
