"""
DEX multisig wallet resolution.

The DEX wallet's threshold and ordered co-signer keys are fetched once when the
module loads and cached for the lifetime of the module instance. Co-signer
rotation on chain after startup is not observed.

Normalization needs the co-signer list, so every normalization call awaits the
resolver's readiness signal (bounded by a timeout) instead of polling for it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping

from ark_dex_adapter.adapter_logging import get_logger
from ark_dex_adapter.chain_client import ChainClient, is_not_found
from ark_dex_adapter.core.exceptions import MultisigResolutionError

logger = get_logger(__name__)


@dataclass(frozen=True)
class MultisigWalletInfo:
    wallet_address: str
    required_signature_count: int
    co_signer_public_keys: tuple[str, ...]


def multisig_attributes(wallet: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """
    Return the wallet's multiSignature asset, or None for a regular wallet.

    Ark v2+ nests it under ``attributes``; some nodes still expose it at the
    top level.
    """
    attributes = wallet.get("attributes") or {}
    asset = attributes.get("multiSignature") or wallet.get("multiSignature")
    return asset or None


def wallet_info_from_account(address: str, wallet: Mapping[str, Any]) -> MultisigWalletInfo:
    """Build MultisigWalletInfo from a raw wallet; raise if it is not a usable multisig."""
    asset = multisig_attributes(wallet)
    if asset is None:
        raise MultisigResolutionError(f"Wallet {address} is not a multisig wallet")
    public_keys = tuple(asset.get("publicKeys") or ())
    try:
        minimum = int(asset.get("min") or 0)
    except (TypeError, ValueError) as e:
        raise MultisigResolutionError(f"Wallet {address} has an invalid signature threshold") from e
    if minimum < 1 or not public_keys:
        raise MultisigResolutionError(
            f"Wallet {address} has an unusable multisig asset (min={minimum}, keys={len(public_keys)})"
        )
    return MultisigWalletInfo(
        wallet_address=address,
        required_signature_count=minimum,
        co_signer_public_keys=public_keys,
    )


class MultisigResolver:
    """
    Resolves the DEX wallet once and signals readiness to waiters.

    resolve() is written by exactly one task (module load); wait_ready() may be
    awaited by any number of action handlers.
    """

    def __init__(self, client: ChainClient, wallet_address: str) -> None:
        if not wallet_address:
            raise ValueError("wallet_address must be non-empty")
        self._client = client
        self._wallet_address = wallet_address
        self._info: MultisigWalletInfo | None = None
        self._error: MultisigResolutionError | None = None
        self._done = asyncio.Event()

    @property
    def wallet_address(self) -> str:
        return self._wallet_address

    @property
    def info(self) -> MultisigWalletInfo | None:
        return self._info

    @property
    def is_ready(self) -> bool:
        return self._info is not None

    async def resolve(self) -> MultisigWalletInfo:
        """
        Fetch and cache the wallet; raise MultisigResolutionError if the wallet
        does not exist, is not multisig, or cannot be fetched. Subsequent calls
        return the cached result (or re-raise the cached failure).
        """
        if self._info is not None:
            return self._info
        if self._error is not None:
            raise self._error
        try:
            wallet = await self._client.get_wallet(self._wallet_address)
            self._info = wallet_info_from_account(self._wallet_address, wallet)
        except MultisigResolutionError as e:
            self._error = e
        except Exception as e:
            if is_not_found(e):
                msg = f"DEX wallet {self._wallet_address} does not exist"
            else:
                msg = f"Failed to fetch DEX wallet {self._wallet_address}: {e}"
            self._error = MultisigResolutionError(msg)
            self._error.__cause__ = e
        finally:
            self._done.set()

        if self._error is not None:
            logger.error(
                "multisig_resolve_failed",
                wallet_address=self._wallet_address,
                error=str(self._error),
            )
            raise self._error
        logger.info(
            "multisig_resolved",
            wallet_address=self._wallet_address,
            required_signatures=self._info.required_signature_count,
            co_signer_count=len(self._info.co_signer_public_keys),
        )
        return self._info

    async def wait_ready(self, timeout: float | None = None) -> MultisigWalletInfo:
        """Wait for resolve() to finish; bounded by timeout (seconds)."""
        if not self._done.is_set():
            try:
                await asyncio.wait_for(self._done.wait(), timeout=timeout)
            except asyncio.TimeoutError as e:
                raise MultisigResolutionError(
                    f"DEX wallet {self._wallet_address} not resolved after {timeout}s"
                ) from e
        if self._error is not None:
            raise self._error
        assert self._info is not None
        return self._info
