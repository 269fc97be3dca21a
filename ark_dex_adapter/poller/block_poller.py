"""
Block poller — periodic chain head polling and addBlock event emission.

Each cycle fetches blocks above the poll cursor, oldest first, and publishes
one ``{"type": "addBlock", "block": {...}}`` payload per block. The cursor
starts at the chain head when the poller starts (no historical backfill) and
only moves forward, so subscribers never see a height regression. Fetch
failures are logged and the cycle is skipped; the next tick retries.

stop() sets a flag checked before every emission: once it returns, nothing
more is published even if a cycle was in flight.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from ark_dex_adapter.adapter_logging import get_logger
from ark_dex_adapter.chain_client import ORDER_ASC, ChainClient
from ark_dex_adapter.transactions import CanonicalBlock, map_block

logger = get_logger(__name__)

ADD_BLOCK_EVENT_TYPE = "addBlock"
DEFAULT_POLL_INTERVAL_SEC = 10.0
DEFAULT_PAGE_SIZE = 100
DEFAULT_STOP_TIMEOUT_SEC = 5.0

Publisher = Callable[[dict[str, Any]], Awaitable[None]]


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    EMITTING = "emitting"
    STOPPED = "stopped"


@dataclass
class PollCursor:
    """Highest block height already reported to subscribers; None until initialized."""

    height: int | None = None

    def advance(self, height: int) -> bool:
        """Move forward to height; return False (and keep the cursor) otherwise."""
        if self.height is not None and height <= self.height:
            return False
        self.height = height
        return True


def add_block_payload(block: CanonicalBlock) -> dict[str, Any]:
    return {"type": ADD_BLOCK_EVENT_TYPE, "block": block.to_dict()}


class BlockPoller:
    """
    Cancellable periodic task owning the PollCursor.

    The cursor is written only by this poller's task; other code may read it.
    """

    def __init__(
        self,
        client: ChainClient,
        publish: Publisher,
        *,
        interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: PollCursor | None = None,
        stop_timeout_sec: float = DEFAULT_STOP_TIMEOUT_SEC,
        log_context: Mapping[str, Any] | None = None,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._client = client
        self._publish = publish
        self._interval_sec = interval_sec
        self._page_size = page_size
        self._stop_timeout_sec = stop_timeout_sec
        self.cursor = cursor or PollCursor()
        self.state = PollerState.IDLE
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._log = logger.bind(**dict(log_context or {}))

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    async def initialize_cursor(self) -> int:
        """Set the cursor to the current chain head height."""
        height = await self._client.get_max_block_height()
        self.cursor.advance(height)
        self._log.info("poller_cursor_initialized", height=self.cursor.height)
        return height

    async def poll_once(self) -> int:
        """
        Run one cycle; return the number of blocks emitted.

        Never raises for fetch/mapping failures: those are logged and the cycle
        counts as empty.
        """
        if self.stop_requested:
            return 0
        self.state = PollerState.POLLING
        try:
            if self.cursor.height is None:
                await self.initialize_cursor()
                return 0
            raw_blocks = await self._client.get_blocks(
                height_from=self.cursor.height + 1,
                limit=self._page_size,
                order=ORDER_ASC,
            )
            blocks = sorted((map_block(b) for b in raw_blocks), key=lambda b: b.height)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._log.warning(
                "poller_fetch_failed",
                cursor_height=self.cursor.height,
                error=str(e),
            )
            return 0
        finally:
            self._settle()

        emitted = 0
        try:
            for block in blocks:
                if self.stop_requested:
                    break
                if self.cursor.height is not None and block.height <= self.cursor.height:
                    continue
                self.state = PollerState.EMITTING
                await self._publish(add_block_payload(block))
                self.cursor.advance(block.height)
                emitted += 1
        finally:
            self._settle()
        if emitted:
            self._log.info(
                "poller_blocks_emitted",
                block_count=emitted,
                cursor_height=self.cursor.height,
            )
        return emitted

    def _settle(self) -> None:
        if self.state is not PollerState.STOPPED:
            self.state = PollerState.IDLE

    def start(self) -> None:
        """Schedule the periodic task on the running loop."""
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_forever())

    async def stop(self) -> None:
        """Stop polling; in-flight fetches may finish but emit nothing."""
        self._stop_event.set()
        task, self._task = self._task, None
        # called from a subscriber inside our own cycle: the loop exits on its own
        if task is not None and not task.done() and task is not asyncio.current_task():
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=self._stop_timeout_sec)
            except asyncio.TimeoutError:
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self.state = PollerState.STOPPED
        self._log.info("poller_stopped", cursor_height=self.cursor.height)

    async def _run_forever(self) -> None:
        self._log.info(
            "poller_started",
            interval_sec=self._interval_sec,
            cursor_height=self.cursor.height,
        )
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_sec)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set():
                break
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self._log.exception("poller_cycle_error", error=str(e))
        self._log.info("poller_loop_exited")
