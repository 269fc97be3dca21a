"""
Environment variable loading for the Ark DEX adapter.

- DEX_WALLET_ADDRESS: multisig DEX wallet (mandatory)
- CHAIN_API_ADDRESS: Ark REST API base URL (default: devnet public API)
- CHAIN_SYMBOL / DEX_MODULE_ALIAS: naming on the DEX side
- CHAIN_POLLING_INTERVAL_MS: block poll interval
- ARK_NETWORK_VERSION: address version byte (30 devnet, 23 mainnet)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is ark_dex_adapter/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_API_ADDRESS = "https://dapi.ark.io/api"
MAINNET_API_ADDRESS = "https://api.ark.io/api"
DEVNET_NETWORK_VERSION = 30
MAINNET_NETWORK_VERSION = 23


def load_adapter_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def env_str(name: str, default: str | None = None) -> str | None:
    """Return a stripped env var, or default when unset/blank."""
    raw = (os.getenv(name) or "").strip()
    return raw or default


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
