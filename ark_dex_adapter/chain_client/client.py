"""
Ark REST API client — account, transaction and block lookups plus broadcast.

Thin async wrapper over httpx: one AsyncClient per adapter instance, JSON
payloads unwrapped from the ``data`` envelope. HTTP errors propagate as
httpx.HTTPStatusError; callers use is_not_found() to tell a missing
resource apart from a transport failure.
"""

from __future__ import annotations

from typing import Any

import httpx

from ark_dex_adapter.adapter_logging import get_logger

logger = get_logger(__name__)

DEFAULT_REQUEST_TIMEOUT_SEC = 15.0
MAX_PAGE_LIMIT = 100
ORDER_ASC = "asc"
ORDER_DESC = "desc"
# 2017-03-21T13:00:00Z; transaction timestamp filters are in seconds since this epoch
ARK_EPOCH_UNIX = 1490101200


def is_not_found(err: BaseException | None) -> bool:
    """True if err is an HTTP 404 from the chain API."""
    return (
        isinstance(err, httpx.HTTPStatusError)
        and err.response is not None
        and err.response.status_code == 404
    )


def _to_epoch(unix_ts: int | None) -> int | None:
    if unix_ts is None:
        return None
    return max(0, int(unix_ts) - ARK_EPOCH_UNIX)


def _order_by(field: str, order: str) -> str:
    order = (order or ORDER_ASC).strip().lower()
    if order not in (ORDER_ASC, ORDER_DESC):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
    return f"{field}:{order}"


class ChainClient:
    """
    Async client for one Ark API endpoint.

    Use as an async context manager or call aclose() when done. ``transport``
    lets tests plug in httpx.MockTransport.
    """

    def __init__(
        self,
        api_address: str,
        *,
        request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_address.strip():
            raise ValueError("api_address must be non-empty")
        self._api_address = api_address.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._api_address,
            timeout=httpx.Timeout(request_timeout_sec),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def api_address(self) -> str:
        return self._api_address

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug("chain_api_get", path=path, params=query)
        resp = await self._client.get(path, params=query)
        resp.raise_for_status()
        return resp.json()

    async def _get_data(self, path: str, params: dict[str, Any] | None = None) -> Any:
        body = await self._get(path, params)
        if not isinstance(body, dict) or "data" not in body:
            raise RuntimeError(f"Ark API returned no data for {path}")
        return body["data"]

    # -- accounts ---------------------------------------------------------

    async def get_wallet(self, address: str) -> dict[str, Any]:
        """GET /wallets/{address}; 404 if the wallet never appeared on chain."""
        return await self._get_data(f"/wallets/{address}")

    # -- transactions -----------------------------------------------------

    async def search_transactions(
        self,
        *,
        sender_address: str | None = None,
        recipient_address: str | None = None,
        block_id: str | None = None,
        timestamp_from: int | None = None,
        timestamp_to: int | None = None,
        limit: int = MAX_PAGE_LIMIT,
        order: str = ORDER_ASC,
    ) -> list[dict[str, Any]]:
        """
        GET /transactions filtered by sender/recipient/block and an inclusive
        unix timestamp range (converted to Ark epoch seconds for the query).
        """
        params = {
            "senderId": sender_address,
            "recipientId": recipient_address,
            "blockId": block_id,
            "timestamp.from": _to_epoch(timestamp_from),
            "timestamp.to": _to_epoch(timestamp_to),
            "orderBy": _order_by("timestamp", order),
            "limit": max(1, min(int(limit), MAX_PAGE_LIMIT)),
        }
        data = await self._get_data("/transactions", params)
        return data if isinstance(data, list) else []

    async def get_transaction(self, transaction_id: str) -> dict[str, Any]:
        return await self._get_data(f"/transactions/{transaction_id}")

    async def broadcast_transactions(self, transactions: list[dict[str, Any]]) -> dict[str, Any]:
        """
        POST /transactions. Returns the raw body: ``data`` holds the accept,
        broadcast, excess and invalid id lists; ``errors`` is keyed by id.
        """
        resp = await self._client.post("/transactions", json={"transactions": transactions})
        resp.raise_for_status()
        return resp.json()

    # -- blocks -----------------------------------------------------------

    async def get_max_block_height(self) -> int:
        """Current chain head height from GET /blockchain."""
        data = await self._get_data("/blockchain")
        return int(data["block"]["height"])

    async def get_blocks(
        self,
        *,
        height_from: int | None = None,
        height_to: int | None = None,
        limit: int = MAX_PAGE_LIMIT,
        order: str = ORDER_ASC,
    ) -> list[dict[str, Any]]:
        """GET /blocks with inclusive height range."""
        params = {
            "height.from": height_from,
            "height.to": height_to,
            "orderBy": _order_by("height", order),
            "limit": max(1, min(int(limit), MAX_PAGE_LIMIT)),
        }
        data = await self._get_data("/blocks", params)
        return data if isinstance(data, list) else []

    async def get_block(self, height_or_id: int | str) -> dict[str, Any]:
        """GET /blocks/{height_or_id}; 404 if no such block."""
        return await self._get_data(f"/blocks/{height_or_id}")
