"""
Ark DEX adapter module — action surface, events and load/unload lifecycle.

The DEX host loads the module with a channel, subscribes to
``<alias>:bootstrap`` and ``<alias>:chainChanges`` and calls the actions
below. Singular lookups raise typed InvalidActionError subclasses; list
lookups turn a not-found chain response into an empty list.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Iterable, Mapping

import httpx

from ark_dex_adapter import __author__, __version__
from ark_dex_adapter.adapter_logging import get_logger
from ark_dex_adapter.chain_client import ORDER_ASC, ORDER_DESC, ChainClient, is_not_found
from ark_dex_adapter.channel import Action, ActionSpec
from ark_dex_adapter.config import AdapterSettings
from ark_dex_adapter.core.exceptions import (
    AccountDidNotExistError,
    AccountWasNotMultisigError,
    AdapterError,
    BlockDidNotExistError,
    ConfigurationError,
    MultisigAccountDidNotExistError,
    TransactionBroadcastError,
    TransactionDidNotExistError,
)
from ark_dex_adapter.multisig import MultisigResolver, multisig_attributes
from ark_dex_adapter.poller import BlockPoller
from ark_dex_adapter.transactions import (
    address_from_public_key,
    aggregate_signatures,
    map_block,
    normalize_transaction,
)

PACKAGE_NAME = "ark-dex-adapter"
MODULE_BOOTSTRAP_EVENT = "bootstrap"
MODULE_CHAIN_STATE_CHANGES_EVENT = "chainChanges"
DEFAULT_TRANSACTION_LIMIT = 100
# Unspecified order: oldest first, starting at fromTimestamp
DEFAULT_TRANSACTION_ORDER = ORDER_ASC


def _limit(params: Mapping[str, Any]) -> int:
    """Requested limit; the default applies only when the caller gave none."""
    limit = params.get("limit")
    return DEFAULT_TRANSACTION_LIMIT if limit is None else int(limit)


def _order(params: Mapping[str, Any]) -> str:
    order = params.get("order")
    if order is None:
        return DEFAULT_TRANSACTION_ORDER
    if not isinstance(order, str) or order.strip().lower() not in (ORDER_ASC, ORDER_DESC):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
    return order.strip().lower()


def _params(action: Action | Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Accept an Action or a raw ``{"params": {...}}`` mapping."""
    if action is None:
        return {}
    if isinstance(action, Action):
        return action.params
    return action.get("params") or {}


class ArkDexAdapter:
    """
    Chain module instance. State owned here: the HTTP client, the multisig
    resolver (cached DEX wallet) and the block poller (poll cursor).
    """

    def __init__(
        self,
        settings: AdapterSettings,
        *,
        client: ChainClient | None = None,
        derive_address: Callable[[str], str] | None = None,
    ) -> None:
        self.settings = settings
        self.alias = settings.module_alias
        self.dex_wallet_address = settings.dex_wallet_address
        self.chain_symbol = settings.chain_symbol
        self._owns_client = client is None
        self.client = client or ChainClient(
            settings.api_address,
            request_timeout_sec=settings.request_timeout_sec,
        )
        self.derive_address = derive_address or functools.partial(
            address_from_public_key, network_version=settings.network_version
        )
        self.resolver = (
            MultisigResolver(self.client, self.dex_wallet_address)
            if self.dex_wallet_address
            else None
        )
        self._log = get_logger(__name__, module_alias=self.alias)
        self.poller = BlockPoller(
            self.client,
            self._publish_chain_change,
            interval_sec=settings.polling_interval_sec,
            page_size=settings.poll_page_size,
            log_context={"module_alias": self.alias},
        )
        self.channel: Any = None

        self.MODULE_BOOTSTRAP_EVENT = MODULE_BOOTSTRAP_EVENT
        self.MODULE_CHAIN_STATE_CHANGES_EVENT = MODULE_CHAIN_STATE_CHANGES_EVENT

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **kwargs: Any) -> "ArkDexAdapter":
        """Build from host options ``{"alias": ..., "config": {...}}``."""
        settings = AdapterSettings.from_mapping(options.get("config"), alias=options.get("alias"))
        return cls(settings, **kwargs)

    # -- module metadata ---------------------------------------------------

    @property
    def dependencies(self) -> list[str]:
        return ["app"]

    @property
    def info(self) -> dict[str, str]:
        return {"author": __author__, "version": __version__, "name": PACKAGE_NAME}

    @property
    def events(self) -> list[str]:
        return [MODULE_BOOTSTRAP_EVENT, MODULE_CHAIN_STATE_CHANGES_EVENT]

    @property
    def actions(self) -> dict[str, ActionSpec]:
        return {
            "getStatus": ActionSpec(handler=self.get_status),
            "getMultisigWalletMembers": ActionSpec(handler=self.get_multisig_wallet_members),
            "getMinMultisigRequiredSignatures": ActionSpec(
                handler=self.get_min_multisig_required_signatures
            ),
            "getOutboundTransactions": ActionSpec(handler=self.get_outbound_transactions),
            "getInboundTransactions": ActionSpec(handler=self.get_inbound_transactions),
            "getInboundTransactionsFromBlock": ActionSpec(
                handler=self.get_inbound_transactions_from_block
            ),
            "getOutboundTransactionsFromBlock": ActionSpec(
                handler=self.get_outbound_transactions_from_block
            ),
            "getMaxBlockHeight": ActionSpec(handler=self.get_max_block_height),
            "getBlocksBetweenHeights": ActionSpec(handler=self.get_blocks_between_heights),
            "getBlockAtHeight": ActionSpec(handler=self.get_block_at_height),
            "getTransaction": ActionSpec(handler=self.get_transaction),
            "postTransaction": ActionSpec(handler=self.post_transaction),
        }

    # -- lifecycle ---------------------------------------------------------

    async def load(self, channel: Any) -> None:
        """
        Resolve the DEX wallet, register with the host, publish bootstrap and
        start polling. Raises ConfigurationError / MultisigResolutionError
        when the module cannot work; nothing is started in that case and an
        owned client is closed.
        """
        if not self.dex_wallet_address or self.resolver is None:
            raise ConfigurationError("Dex wallet address not provided in the config")

        try:
            await self.resolver.resolve()
            self.channel = channel
            await channel.invoke("app:updateModuleState", {self.alias: {}})
            await channel.publish(f"{self.alias}:{MODULE_BOOTSTRAP_EVENT}")
        except Exception as e:
            self._log.error("adapter_load_failed", error=str(e))
            self.channel = None
            if self._owns_client:
                await self.client.aclose()
            raise

        try:
            await self.poller.initialize_cursor()
        except Exception as e:
            # first poll cycle retries the head lookup
            self._log.warning("adapter_cursor_init_failed", error=str(e))
        self.poller.start()
        self._log.info(
            "adapter_loaded",
            chain_symbol=self.chain_symbol,
            dex_wallet=self.dex_wallet_address,
            polling_interval_ms=self.settings.polling_interval_ms,
        )

    async def unload(self) -> None:
        await self.poller.stop()
        if self._owns_client:
            await self.client.aclose()
        self._log.info("adapter_unloaded")

    async def _publish_chain_change(self, payload: dict[str, Any]) -> None:
        if self.channel is None:
            return
        await self.channel.publish(f"{self.alias}:{MODULE_CHAIN_STATE_CHANGES_EVENT}", payload)

    # -- helpers -----------------------------------------------------------

    async def _co_signer_keys(self) -> tuple[str, ...]:
        if self.resolver is None:
            raise ConfigurationError("Dex wallet address not provided in the config")
        info = await self.resolver.wait_ready(self.settings.readiness_timeout_sec)
        return info.co_signer_public_keys

    async def _normalize_all(self, raw_transactions: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        keys = await self._co_signer_keys()
        return [
            normalize_transaction(raw, keys, self.derive_address).to_dict()
            for raw in raw_transactions
        ]

    async def _get_multisig_asset(self, wallet_address: str) -> Mapping[str, Any]:
        try:
            wallet = await self.client.get_wallet(wallet_address)
        except Exception as e:
            raise MultisigAccountDidNotExistError(
                f"Error getting multisig account with address {wallet_address}", e
            ) from e
        asset = multisig_attributes(wallet)
        if asset is None:
            raise AccountWasNotMultisigError(
                f"Account with address {wallet_address} is not a multisig account"
            )
        return asset

    async def _transaction_list(
        self,
        wallet_address: str,
        description: str,
        **query: Any,
    ) -> list[dict[str, Any]]:
        if query.get("limit", DEFAULT_TRANSACTION_LIMIT) <= 0:
            return []
        try:
            raw = await self.client.search_transactions(**query)
            return await self._normalize_all(raw)
        except AdapterError:
            raise
        except Exception as e:
            if is_not_found(e):
                return []
            raise AccountDidNotExistError(
                f"Error getting {description} transactions with account address {wallet_address}",
                e,
            ) from e

    @staticmethod
    def _time_window(params: Mapping[str, Any]) -> dict[str, Any]:
        order = _order(params)
        from_ts = params.get("fromTimestamp")
        window: dict[str, Any] = {
            "order": order,
            "limit": _limit(params),
        }
        if from_ts is not None:
            # asc walks forward from fromTimestamp, desc walks back from it
            key = "timestamp_from" if order == ORDER_ASC else "timestamp_to"
            window[key] = int(from_ts)
        return window

    # -- actions -----------------------------------------------------------

    def get_status(self, action: Action | None = None) -> dict[str, str]:
        return {"version": __version__}

    async def get_multisig_wallet_members(self, action: Action) -> list[str]:
        wallet_address = _params(action)["walletAddress"]
        asset = await self._get_multisig_asset(wallet_address)
        return [self.derive_address(pk) for pk in asset.get("publicKeys") or ()]

    async def get_min_multisig_required_signatures(self, action: Action) -> int:
        wallet_address = _params(action)["walletAddress"]
        asset = await self._get_multisig_asset(wallet_address)
        return int(asset["min"])

    async def get_outbound_transactions(self, action: Action) -> list[dict[str, Any]]:
        params = _params(action)
        wallet_address = params["walletAddress"]
        return await self._transaction_list(
            wallet_address,
            "outbound",
            sender_address=wallet_address,
            **self._time_window(params),
        )

    async def get_inbound_transactions(self, action: Action) -> list[dict[str, Any]]:
        params = _params(action)
        wallet_address = params["walletAddress"]
        return await self._transaction_list(
            wallet_address,
            "inbound",
            recipient_address=wallet_address,
            **self._time_window(params),
        )

    async def get_inbound_transactions_from_block(self, action: Action) -> list[dict[str, Any]]:
        params = _params(action)
        wallet_address = params["walletAddress"]
        return await self._transaction_list(
            wallet_address,
            "inbound",
            recipient_address=wallet_address,
            block_id=params["blockId"],
        )

    async def get_outbound_transactions_from_block(self, action: Action) -> list[dict[str, Any]]:
        params = _params(action)
        wallet_address = params["walletAddress"]
        return await self._transaction_list(
            wallet_address,
            "outbound",
            sender_address=wallet_address,
            block_id=params["blockId"],
        )

    async def get_max_block_height(self, action: Action | None = None) -> int:
        return await self.client.get_max_block_height()

    async def get_blocks_between_heights(self, action: Action) -> list[dict[str, Any]]:
        """Blocks with fromHeight < height <= toHeight, newest first."""
        params = _params(action)
        from_height = int(params["fromHeight"])
        to_height = int(params["toHeight"])
        limit = _limit(params)
        if to_height <= from_height or limit <= 0:
            return []
        try:
            raw = await self.client.get_blocks(
                height_from=from_height + 1,
                height_to=to_height,
                limit=limit,
                order=ORDER_DESC,
            )
        except Exception as e:
            if is_not_found(e):
                return []
            raise BlockDidNotExistError(
                f"Error getting blocks between heights {from_height} and {to_height}", e
            ) from e
        blocks = [map_block(b) for b in raw]
        blocks = [b for b in blocks if from_height < b.height <= to_height]
        blocks.sort(key=lambda b: b.height, reverse=True)
        return [b.to_dict() for b in blocks[:limit]]

    async def get_block_at_height(self, action: Action) -> dict[str, Any]:
        height = _params(action)["height"]
        try:
            raw = await self.client.get_block(int(height))
        except Exception as e:
            raise BlockDidNotExistError(f"Error getting block at height {height}", e) from e
        block = map_block(raw)
        if block.height != int(height):
            raise BlockDidNotExistError(f"Error getting block at height {height}")
        return block.to_dict()

    async def get_transaction(self, action: Action) -> dict[str, Any]:
        """Look up one transaction by its native chain id."""
        transaction_id = _params(action)["transactionId"]
        try:
            raw = await self.client.get_transaction(transaction_id)
            return (await self._normalize_all([raw]))[0]
        except AdapterError:
            raise
        except Exception as e:
            raise TransactionDidNotExistError(
                f"Error getting transaction with id {transaction_id}", e
            ) from e

    async def post_transaction(self, action: Action) -> dict[str, Any]:
        """
        Broadcast a pre-signed transaction. DEX-style signature packets
        (``[{signerAddress, publicKey, signature}, ...]``) are merged into Ark's
        positional multisig signature list first.
        """
        transaction = dict(_params(action)["transaction"])
        signatures = transaction.get("signatures")
        if signatures and not isinstance(signatures[0], str):
            keys = await self._co_signer_keys()
            transaction["signatures"] = aggregate_signatures(signatures, keys)

        try:
            body = await self.client.broadcast_transactions([transaction])
        except httpx.HTTPStatusError as e:
            raise TransactionBroadcastError(
                f"Error broadcasting transaction to the {self.chain_symbol} network",
                _broadcast_errors(e.response),
            ) from e
        except Exception as e:
            raise TransactionBroadcastError(
                f"Error broadcasting transaction to the {self.chain_symbol} network", e
            ) from e

        receipt = body.get("data") or {}
        if not receipt.get("accept"):
            raise TransactionBroadcastError(
                f"Transaction was rejected by the {self.chain_symbol} network",
                body.get("errors") or receipt,
            )
        self._log.info(
            "transaction_broadcast",
            accepted=receipt.get("accept"),
            broadcast=receipt.get("broadcast"),
        )
        return {
            "accept": list(receipt.get("accept") or []),
            "broadcast": list(receipt.get("broadcast") or []),
            "excess": list(receipt.get("excess") or []),
            "invalid": list(receipt.get("invalid") or []),
        }


def _broadcast_errors(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("errors") or body.get("message") or body
    return body


__all__ = [
    "ArkDexAdapter",
    "MODULE_BOOTSTRAP_EVENT",
    "MODULE_CHAIN_STATE_CHANGES_EVENT",
]
