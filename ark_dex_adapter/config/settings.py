"""
Adapter settings.

Two sources feed the same dataclass: the ``config`` mapping handed over by the
DEX host (camelCase keys, as the orchestrator writes them) and environment
variables for standalone runs. The DEX wallet address is mandatory; its
absence is reported when the module loads, not when settings are built, so a
host can still inspect alias/info of an unconfigured module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ark_dex_adapter.config.env import (
    DEVNET_API_ADDRESS,
    DEVNET_NETWORK_VERSION,
    env_float,
    env_int,
    env_str,
    load_adapter_env,
)

DEFAULT_MODULE_ALIAS = "ark_dex_adapter"
DEFAULT_CHAIN_SYMBOL = "ark"
DEFAULT_POLLING_INTERVAL_MS = 10_000
DEFAULT_REQUEST_TIMEOUT_SEC = 15.0
DEFAULT_READINESS_TIMEOUT_SEC = 30.0
DEFAULT_POLL_PAGE_SIZE = 100
MIN_POLLING_INTERVAL_MS = 100


@dataclass
class AdapterSettings:
    """
    Config for one adapter module instance.

    module_alias: Prefix of published events and invoked actions.
    dex_wallet_address: Multisig wallet owned by the DEX (mandatory at load).
    api_address: Ark REST API base URL, without trailing slash.
    polling_interval_ms: Delay between block poll cycles.
    network_version: Address version byte used to derive co-signer addresses.
    readiness_timeout_sec: Max wait for the multisig wallet before a
        normalization call gives up.
    poll_page_size: Max blocks fetched per poll cycle.
    """

    dex_wallet_address: str | None = None
    module_alias: str = DEFAULT_MODULE_ALIAS
    chain_symbol: str = DEFAULT_CHAIN_SYMBOL
    api_address: str = DEVNET_API_ADDRESS
    polling_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
    network_version: int = DEVNET_NETWORK_VERSION
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    readiness_timeout_sec: float = DEFAULT_READINESS_TIMEOUT_SEC
    poll_page_size: int = DEFAULT_POLL_PAGE_SIZE

    def __post_init__(self) -> None:
        self.api_address = self.api_address.rstrip("/")
        self.polling_interval_ms = max(MIN_POLLING_INTERVAL_MS, int(self.polling_interval_ms))
        self.poll_page_size = max(1, int(self.poll_page_size))
        if not 0 <= int(self.network_version) <= 255:
            raise ValueError("network_version must fit in one byte")

    @property
    def polling_interval_sec(self) -> float:
        return self.polling_interval_ms / 1000.0

    @classmethod
    def from_mapping(
        cls,
        config: Mapping[str, Any] | None,
        *,
        alias: str | None = None,
    ) -> "AdapterSettings":
        """Build from a host-provided config mapping (camelCase keys)."""
        cfg = dict(config or {})
        kwargs: dict[str, Any] = {}
        keys = {
            "dexWalletAddress": "dex_wallet_address",
            "chainSymbol": "chain_symbol",
            "address": "api_address",
            "pollingInterval": "polling_interval_ms",
            "networkVersion": "network_version",
            "requestTimeout": "request_timeout_sec",
            "readinessTimeout": "readiness_timeout_sec",
            "pollPageSize": "poll_page_size",
        }
        for key, field_name in keys.items():
            value = cfg.get(key)
            if value is not None and value != "":
                kwargs[field_name] = value
        if alias:
            kwargs["module_alias"] = alias
        return cls(**kwargs)


def get_settings() -> AdapterSettings:
    """Return settings from the environment (.env loaded first)."""
    load_adapter_env()
    return AdapterSettings(
        dex_wallet_address=env_str("DEX_WALLET_ADDRESS"),
        module_alias=env_str("DEX_MODULE_ALIAS", DEFAULT_MODULE_ALIAS),
        chain_symbol=env_str("CHAIN_SYMBOL", DEFAULT_CHAIN_SYMBOL),
        api_address=env_str("CHAIN_API_ADDRESS", DEVNET_API_ADDRESS),
        polling_interval_ms=env_int("CHAIN_POLLING_INTERVAL_MS", DEFAULT_POLLING_INTERVAL_MS),
        network_version=env_int("ARK_NETWORK_VERSION", DEVNET_NETWORK_VERSION),
        request_timeout_sec=env_float("CHAIN_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC),
        readiness_timeout_sec=env_float("DEX_READINESS_TIMEOUT_SEC", DEFAULT_READINESS_TIMEOUT_SEC),
    )
