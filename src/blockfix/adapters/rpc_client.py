"""JSON-RPC provider adapter (Ethereum-style node) over httpx.

Responsibility:
- Send raw JSON-RPC requests (`eth_getBlockByHash`, `eth_chainId`,
  `eth_blockNumber`) to the configured endpoint.
- Turn transport failures and JSON-RPC error objects into `UpstreamError`.
- Tag fetched blocks with the hash the provider reports for them.

Use as an async context manager so the underlying client gets closed.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from blockfix.adapters.http_client import build_async_client
from blockfix.core.config import AppSettings
from blockfix.core.domain.models import BlockHash, CanonicalBlock
from blockfix.core.errors import InputParseError, UpstreamError

logger = logging.getLogger(__name__)


class JsonRpcUpstreamClient:
    """Implements `UpstreamClient` against a JSON-RPC endpoint."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        return self._settings.rpc_url

    async def __aenter__(self) -> "JsonRpcUpstreamClient":
        self._client = build_async_client(self._settings, transport=self._transport)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _call(self, method: str, params: list[Any]) -> Any:
        if self._client is None:
            raise RuntimeError("JsonRpcUpstreamClient must be used inside `async with`")

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{method} request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError(f"{method}: provider returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise UpstreamError(f"{method}: unexpected response shape from provider")
        if body.get("error") is not None:
            error = body["error"]
            if isinstance(error, dict):
                message = f"{error.get('message')} (code {error.get('code')})"
            else:
                message = str(error)
            raise UpstreamError(f"{method} failed: {message}")
        return body.get("result")

    async def fetch_block_by_hash(self, block_hash: BlockHash) -> CanonicalBlock | None:
        result = await self._call("eth_getBlockByHash", [block_hash.hex(), True])
        if result is None:
            logger.debug("Provider has no block %s", block_hash)
            return None
        if not isinstance(result, dict):
            raise UpstreamError(f"eth_getBlockByHash returned a non-object for {block_hash}")

        reported = result.get("hash")
        if not isinstance(reported, str):
            raise UpstreamError(f"Provider returned block {block_hash} without a hash")
        try:
            reported_hash = BlockHash.from_hex(reported)
        except InputParseError as exc:
            raise UpstreamError(f"Provider returned an invalid hash for {block_hash}: {exc}") from exc
        return CanonicalBlock(hash=reported_hash, payload=result)

    async def _call_quantity(self, method: str) -> int:
        result = await self._call(method, [])
        try:
            return int(result, 16)
        except (TypeError, ValueError):
            raise UpstreamError(f"{method} returned an invalid quantity: {result!r}") from None

    async def chain_id(self) -> int:
        return await self._call_quantity("eth_chainId")

    async def block_number(self) -> int:
        return await self._call_quantity("eth_blockNumber")
