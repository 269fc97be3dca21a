"""
Pytest fixtures for adapter tests. The Ark API is faked with httpx.MockTransport
so tests run without a node.
"""

from __future__ import annotations

import httpx
import pytest

from ark_dex_adapter.chain_client import ChainClient
from fake_ark import API_ADDRESS, FakeArkApi


@pytest.fixture
def fake_api() -> FakeArkApi:
    return FakeArkApi()


@pytest.fixture
def make_client(fake_api):
    """Factory: ChainClient bound to the fake API (create inside the test's event loop)."""

    def _make() -> ChainClient:
        return ChainClient(API_ADDRESS, transport=httpx.MockTransport(fake_api.handler))

    return _make
