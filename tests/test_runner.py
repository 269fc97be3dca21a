"""
Runner CLI tests: argument overrides, network switch and startup failure exit code.
"""

from __future__ import annotations

from unittest.mock import patch

from ark_dex_adapter import runner
from ark_dex_adapter.config.env import MAINNET_API_ADDRESS, MAINNET_NETWORK_VERSION
from ark_dex_adapter.core.exceptions import ConfigurationError


def test_build_settings_overrides_env(monkeypatch):
    monkeypatch.setenv("DEX_WALLET_ADDRESS", "DFromEnv")
    args = runner._parse_args(["--wallet", "DFromCli", "--interval-ms", "2000"])
    settings = runner.build_settings(args)
    assert settings.dex_wallet_address == "DFromCli"
    assert settings.polling_interval_ms == 2000


def test_main_returns_1_on_startup_failure(monkeypatch):
    monkeypatch.delenv("DEX_WALLET_ADDRESS", raising=False)

    async def failing_run(settings):
        raise ConfigurationError("Dex wallet address not provided in the config")

    with patch.object(runner, "run", failing_run):
        assert runner.main([]) == 1


def test_mainnet_switch(monkeypatch):
    monkeypatch.delenv("CHAIN_API_ADDRESS", raising=False)
    monkeypatch.delenv("ARK_NETWORK_VERSION", raising=False)
    settings = runner.build_settings(runner._parse_args(["--mainnet"]))
    assert settings.api_address == MAINNET_API_ADDRESS
    assert settings.network_version == MAINNET_NETWORK_VERSION

    settings = runner.build_settings(runner._parse_args(["--mainnet", "--api", "https://node.example/api"]))
    assert settings.api_address == "https://node.example/api"
    assert settings.network_version == MAINNET_NETWORK_VERSION


def test_devnet_is_default(monkeypatch):
    monkeypatch.delenv("CHAIN_API_ADDRESS", raising=False)
    monkeypatch.delenv("ARK_NETWORK_VERSION", raising=False)
    settings = runner.build_settings(runner._parse_args([]))
    assert settings.network_version == 30
