"""
Inter-module channel: events and actions addressed as ``<alias>:<name>``.
"""

from ark_dex_adapter.channel.app import AppStateModule
from ark_dex_adapter.channel.bus import (
    Action,
    ActionSpec,
    ChannelEvent,
    InMemoryChannel,
    split_name,
)

__all__ = [
    "Action",
    "ActionSpec",
    "AppStateModule",
    "ChannelEvent",
    "InMemoryChannel",
    "split_name",
]
