"""
In-process channel: event pub/sub plus action invocation between modules.

Names are ``<moduleAlias>:<name>`` for both events and actions. Subscribers
may be sync or async callables; a failing subscriber is logged and does not
stop delivery to the others. Delivery is at-least-once from the publisher's
point of view; consumers must be idempotent.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from ark_dex_adapter.adapter_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChannelEvent:
    name: str
    data: Any = None


@dataclass(frozen=True)
class Action:
    """An inbound action call: ``params`` carries the named fields."""

    name: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)


ActionHandler = Callable[[Action], Any]
EventHandler = Callable[[ChannelEvent], Awaitable[None] | None]


@dataclass(frozen=True)
class ActionSpec:
    handler: ActionHandler


def split_name(full_name: str) -> tuple[str, str]:
    """'alias:name' -> ('alias', 'name')."""
    alias, sep, name = full_name.partition(":")
    if not sep or not alias or not name:
        raise ValueError(f"Expected '<module>:<name>', got {full_name!r}")
    return alias, name


class InMemoryChannel:
    """Single-loop channel used by the runner and the test suite."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)
        self._modules: dict[str, Mapping[str, ActionSpec]] = {}

    def register_module(self, alias: str, actions: Mapping[str, ActionSpec]) -> None:
        self._modules[alias] = actions

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        split_name(event_name)
        self._subscribers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_name) or []
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event_name: str, data: Any = None) -> None:
        event = ChannelEvent(name=event_name, data=data)
        for handler in list(self._subscribers.get(event_name, ())):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("channel_subscriber_failed", event_name=event_name, error=str(e))

    async def invoke(self, action_name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Call ``<alias>:<action>`` on a registered module and return its result."""
        alias, name = split_name(action_name)
        actions = self._modules.get(alias)
        if actions is None:
            raise LookupError(f"No module registered under alias {alias!r}")
        spec = actions.get(name)
        if spec is None:
            raise LookupError(f"Module {alias!r} has no action {name!r}")
        result = spec.handler(Action(name=action_name, params=dict(params or {})))
        if inspect.isawaitable(result):
            result = await result
        return result
