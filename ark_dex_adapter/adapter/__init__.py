"""
DEX-facing chain module: actions, events and lifecycle.
"""

from ark_dex_adapter.adapter.module import (
    MODULE_BOOTSTRAP_EVENT,
    MODULE_CHAIN_STATE_CHANGES_EVENT,
    ArkDexAdapter,
)

__all__ = ["MODULE_BOOTSTRAP_EVENT", "MODULE_CHAIN_STATE_CHANGES_EVENT", "ArkDexAdapter"]
