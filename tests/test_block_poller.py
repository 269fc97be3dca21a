"""
Tests for the block poller: cursor handling, emission order and failure isolation.
"""

from __future__ import annotations

import asyncio

from structlog.testing import capture_logs

from ark_dex_adapter.poller import BlockPoller, PollCursor, PollerState


def _collector():
    events: list[dict] = []

    async def publish(payload: dict) -> None:
        events.append(payload)

    return events, publish


def test_poll_cycle_emits_new_blocks_in_height_order(make_client, fake_api):
    """Cursor 100, blocks [101, 102] -> two events, 101 then 102, cursor 102."""
    fake_api.add_blocks(102, 101)
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, cursor=PollCursor(100))
            emitted = await poller.poll_once()
            return poller, emitted

    poller, emitted = asyncio.run(_run())
    assert emitted == 2
    assert [e["type"] for e in events] == ["addBlock", "addBlock"]
    assert [e["block"]["height"] for e in events] == [101, 102]
    assert poller.cursor.height == 102
    assert poller.state is PollerState.IDLE


def test_poll_cycle_without_new_blocks(make_client, fake_api):
    fake_api.add_blocks(99, 100)
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, cursor=PollCursor(100))
            return await poller.poll_once()

    assert asyncio.run(_run()) == 0
    assert events == []


def test_cursor_initialized_from_chain_head_without_backfill(make_client, fake_api):
    fake_api.add_blocks(98, 99, 100)
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish)
            first = await poller.poll_once()
            fake_api.add_blocks(101)
            second = await poller.poll_once()
            return poller, first, second

    poller, first, second = asyncio.run(_run())
    assert first == 0
    assert second == 1
    assert [e["block"]["height"] for e in events] == [101]
    assert poller.cursor.height == 101


def test_fetch_failure_skips_cycle_and_retries(make_client, fake_api):
    fake_api.add_blocks(101)
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, cursor=PollCursor(100))
            fake_api.fail_blocks = True
            failed = await poller.poll_once()
            fake_api.fail_blocks = False
            recovered = await poller.poll_once()
            return poller, failed, recovered

    poller, failed, recovered = asyncio.run(_run())
    assert failed == 0
    assert recovered == 1
    assert poller.cursor.height == 101


def test_heights_never_regress_across_cycles(make_client, fake_api):
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, cursor=PollCursor(100), page_size=2)
            fake_api.add_blocks(101, 102, 103)
            await poller.poll_once()
            await poller.poll_once()
            fake_api.add_blocks(104, 105)
            await poller.poll_once()
            return poller

    poller = asyncio.run(_run())
    heights = [e["block"]["height"] for e in events]
    assert heights == sorted(heights)
    assert heights == [101, 102, 103, 104, 105]
    assert poller.cursor.height == 105


def test_cursor_never_rewinds():
    cursor = PollCursor(10)
    assert cursor.advance(11) is True
    assert cursor.advance(5) is False
    assert cursor.advance(11) is False
    assert cursor.height == 11


def test_no_emission_after_stop(make_client, fake_api):
    fake_api.add_blocks(101, 102)
    events: list[dict] = []
    holder: dict = {}

    async def publish(payload: dict) -> None:
        events.append(payload)
        # stop requested while the cycle is still emitting
        await holder["poller"].stop()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, cursor=PollCursor(100))
            holder["poller"] = poller
            await poller.poll_once()
            return poller

    poller = asyncio.run(_run())
    assert [e["block"]["height"] for e in events] == [101]
    assert poller.cursor.height == 101


def test_periodic_task_start_and_stop(make_client, fake_api):
    events, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(client, publish, interval_sec=0.01, cursor=PollCursor(100))
            poller.start()
            assert poller.running
            fake_api.add_blocks(101)
            for _ in range(200):
                if events:
                    break
                await asyncio.sleep(0.01)
            await poller.stop()
            fake_api.add_blocks(102)
            await asyncio.sleep(0.05)
            return poller

    poller = asyncio.run(_run())
    assert [e["block"]["height"] for e in events] == [101]
    assert not poller.running
    assert poller.state is PollerState.STOPPED


def test_stop_from_subscriber_inside_poll_task(make_client, fake_api):
    """A chainChanges subscriber that unloads the module stops the loop without waiting on itself."""
    fake_api.add_blocks(101, 102)
    events: list[dict] = []
    holder: dict = {}

    async def publish(payload: dict) -> None:
        events.append(payload)
        await holder["poller"].stop()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(
                client, publish, interval_sec=0.01, cursor=PollCursor(100), stop_timeout_sec=5
            )
            holder["poller"] = poller
            poller.start()
            task = poller._task
            await asyncio.wait_for(task, timeout=2)
            return poller

    with capture_logs() as logs:
        poller = asyncio.run(_run())
    assert [e["block"]["height"] for e in events] == [101]
    assert poller.state is PollerState.STOPPED
    assert not poller.running
    names = [entry["event"] for entry in logs]
    assert "poller_stopped" in names
    assert names[-1] == "poller_loop_exited"


def test_log_context_is_bound_to_poller_events(make_client, fake_api):
    fake_api.add_blocks(101)
    _, publish = _collector()

    async def _run():
        async with make_client() as client:
            poller = BlockPoller(
                client, publish, cursor=PollCursor(100), log_context={"module_alias": "dark_dex_adapter"}
            )
            await poller.poll_once()

    with capture_logs() as logs:
        asyncio.run(_run())
    emitted = [entry for entry in logs if entry["event"] == "poller_blocks_emitted"]
    assert emitted and emitted[0]["module_alias"] == "dark_dex_adapter"
