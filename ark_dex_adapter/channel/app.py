"""
Minimal ``app`` host module: keeps per-module state published by chain modules.

The adapter declares a dependency on ``app`` and calls
``app:updateModuleState`` during load. In production the DEX host provides this
module; the runner and tests register this one.
"""

from __future__ import annotations

from typing import Any

from ark_dex_adapter.channel.bus import Action, ActionSpec


class AppStateModule:
    alias = "app"

    def __init__(self) -> None:
        self.module_state: dict[str, Any] = {}

    @property
    def actions(self) -> dict[str, ActionSpec]:
        return {
            "updateModuleState": ActionSpec(handler=self.update_module_state),
            "getModuleState": ActionSpec(handler=lambda action: dict(self.module_state)),
        }

    def update_module_state(self, action: Action) -> None:
        for alias, state in action.params.items():
            self.module_state[alias] = state
