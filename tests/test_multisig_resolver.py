"""
Tests for DEX multisig wallet resolution and the readiness signal.
"""

from __future__ import annotations

import asyncio

import pytest

from ark_dex_adapter.core.exceptions import MultisigResolutionError
from ark_dex_adapter.multisig import MultisigResolver, MultisigWalletInfo, wallet_info_from_account
from fake_ark import DEX_WALLET, MEMBER_A, PK_A, PK_B, UNKNOWN_WALLET


def test_resolve_multisig_wallet(make_client, fake_api):
    async def _run():
        async with make_client() as client:
            resolver = MultisigResolver(client, DEX_WALLET)
            info = await resolver.resolve()
            again = await resolver.resolve()
            ready = await resolver.wait_ready(timeout=1)
            return resolver, info, again, ready

    resolver, info, again, ready = asyncio.run(_run())
    assert info == MultisigWalletInfo(DEX_WALLET, 2, (PK_A, PK_B))
    assert again is info
    assert ready is info
    assert resolver.is_ready
    # cached: one wallet request only
    assert sum(1 for r in fake_api.requests if "/wallets/" in r.url.path) == 1


def test_resolve_unknown_wallet_is_fatal(make_client):
    async def _run():
        async with make_client() as client:
            resolver = MultisigResolver(client, UNKNOWN_WALLET)
            with pytest.raises(MultisigResolutionError, match="does not exist"):
                await resolver.resolve()
            # waiters fail fast with the same error
            with pytest.raises(MultisigResolutionError, match="does not exist"):
                await resolver.wait_ready(timeout=1)

    asyncio.run(_run())


def test_resolve_regular_wallet_is_fatal(make_client):
    async def _run():
        async with make_client() as client:
            resolver = MultisigResolver(client, MEMBER_A)
            with pytest.raises(MultisigResolutionError, match="not a multisig"):
                await resolver.resolve()
            assert resolver.info is None

    asyncio.run(_run())


def test_wait_ready_blocks_until_resolved(make_client):
    async def _run():
        async with make_client() as client:
            resolver = MultisigResolver(client, DEX_WALLET)
            waiter = asyncio.create_task(resolver.wait_ready(timeout=5))
            await asyncio.sleep(0)
            assert not waiter.done()
            await resolver.resolve()
            return await waiter

    info = asyncio.run(_run())
    assert info.co_signer_public_keys == (PK_A, PK_B)


def test_wait_ready_is_bounded(make_client):
    async def _run():
        async with make_client() as client:
            resolver = MultisigResolver(client, DEX_WALLET)
            with pytest.raises(MultisigResolutionError, match="not resolved"):
                await resolver.wait_ready(timeout=0.01)

    asyncio.run(_run())


def test_wallet_info_from_account_validation():
    top_level = {"multiSignature": {"min": 1, "publicKeys": [PK_A]}}
    assert wallet_info_from_account("W", top_level).required_signature_count == 1

    with pytest.raises(MultisigResolutionError, match="unusable"):
        wallet_info_from_account("W", {"attributes": {"multiSignature": {"min": 0, "publicKeys": [PK_A]}}})
    with pytest.raises(MultisigResolutionError, match="unusable"):
        wallet_info_from_account("W", {"attributes": {"multiSignature": {"min": 2, "publicKeys": []}}})
