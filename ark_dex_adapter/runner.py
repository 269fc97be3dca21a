"""
Standalone runner: load the adapter on an in-memory channel and log its events.

Useful to check a deployment's config against a live Ark node before wiring the
module into the DEX host. Runs until SIGINT/SIGTERM, then unloads cleanly.

Usage: python -m ark_dex_adapter.runner [--wallet ADDRESS] [--api URL] [--interval-ms N] [--mainnet]
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from dataclasses import replace

from ark_dex_adapter.adapter import ArkDexAdapter
from ark_dex_adapter.adapter_logging import get_logger
from ark_dex_adapter.channel import AppStateModule, ChannelEvent, InMemoryChannel
from ark_dex_adapter.config import AdapterSettings, get_settings
from ark_dex_adapter.config.env import MAINNET_API_ADDRESS, MAINNET_NETWORK_VERSION
from ark_dex_adapter.core.exceptions import AdapterError

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Ark DEX adapter standalone")
    parser.add_argument("--wallet", help="DEX multisig wallet address (overrides DEX_WALLET_ADDRESS)")
    parser.add_argument("--api", help="Ark API base URL (overrides CHAIN_API_ADDRESS)")
    parser.add_argument("--interval-ms", type=int, help="Block polling interval in milliseconds")
    parser.add_argument(
        "--mainnet",
        action="store_true",
        help="Use the public mainnet API and address version unless --api is given",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> AdapterSettings:
    settings = get_settings()
    overrides: dict[str, object] = {}
    if args.mainnet:
        overrides["api_address"] = MAINNET_API_ADDRESS
        overrides["network_version"] = MAINNET_NETWORK_VERSION
    if args.wallet:
        overrides["dex_wallet_address"] = args.wallet
    if args.api:
        overrides["api_address"] = args.api
    if args.interval_ms:
        overrides["polling_interval_ms"] = args.interval_ms
    return replace(settings, **overrides) if overrides else settings


async def run(settings: AdapterSettings) -> None:
    channel = InMemoryChannel()
    app = AppStateModule()
    channel.register_module(app.alias, app.actions)

    adapter = ArkDexAdapter(settings)
    channel.register_module(adapter.alias, adapter.actions)

    def _log_event(event: ChannelEvent) -> None:
        logger.info("runner_event", event_name=event.name, data=event.data)

    for name in adapter.events:
        channel.subscribe(f"{adapter.alias}:{name}", _log_event)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on Windows event loops
            pass

    try:
        await adapter.load(channel)
        await stop.wait()
    finally:
        await adapter.unload()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = build_settings(args)
        asyncio.run(run(settings))
    except AdapterError as e:
        logger.error("runner_startup_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("runner_keyboard_interrupt")
    return 0


if __name__ == "__main__":
    sys.exit(main())
