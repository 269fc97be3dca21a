"""
Tests for the in-process channel: pub/sub delivery and action invocation.
"""

from __future__ import annotations

import asyncio

import pytest

from ark_dex_adapter.channel import Action, ActionSpec, AppStateModule, InMemoryChannel, split_name


def test_publish_delivers_to_sync_and_async_subscribers():
    seen: list = []

    async def async_handler(event):
        seen.append(("async", event.name, event.data))

    async def _run():
        channel = InMemoryChannel()
        channel.subscribe("mod:evt", lambda e: seen.append(("sync", e.name, e.data)))
        channel.subscribe("mod:evt", async_handler)
        await channel.publish("mod:evt", {"k": 1})
        await channel.publish("mod:other", {"k": 2})

    asyncio.run(_run())
    assert seen == [("sync", "mod:evt", {"k": 1}), ("async", "mod:evt", {"k": 1})]


def test_failing_subscriber_does_not_block_others():
    seen: list = []

    def broken(event):
        raise RuntimeError("boom")

    async def _run():
        channel = InMemoryChannel()
        channel.subscribe("mod:evt", broken)
        channel.subscribe("mod:evt", seen.append)
        await channel.publish("mod:evt")

    asyncio.run(_run())
    assert len(seen) == 1
    assert seen[0].data is None


def test_unsubscribe():
    seen: list = []

    async def _run():
        channel = InMemoryChannel()
        channel.subscribe("mod:evt", seen.append)
        channel.unsubscribe("mod:evt", seen.append)
        await channel.publish("mod:evt")

    asyncio.run(_run())
    assert seen == []


def test_invoke_routes_to_registered_module():
    async def double(action: Action) -> int:
        return action.params["n"] * 2

    async def _run():
        channel = InMemoryChannel()
        channel.register_module("calc", {"double": ActionSpec(handler=double)})
        result = await channel.invoke("calc:double", {"n": 21})
        with pytest.raises(LookupError):
            await channel.invoke("calc:triple", {})
        with pytest.raises(LookupError):
            await channel.invoke("nope:double", {})
        return result

    assert asyncio.run(_run()) == 42


def test_app_state_module():
    async def _run():
        channel = InMemoryChannel()
        app = AppStateModule()
        channel.register_module(app.alias, app.actions)
        await channel.invoke("app:updateModuleState", {"ark_dex_adapter": {}})
        return await channel.invoke("app:getModuleState")

    assert asyncio.run(_run()) == {"ark_dex_adapter": {}}


def test_split_name():
    assert split_name("ark:chainChanges") == ("ark", "chainChanges")
    with pytest.raises(ValueError):
        split_name("chainChanges")
