# feecast/chain/rpc_source.py
from __future__ import annotations

from typing import Any, Optional

import httpx

from feecast import logs
from feecast.chain.types import BlockRecord, hex_quantity
from feecast.utils.errors import (
    PermanentUpstreamError,
    TransientUpstreamError,
    UpstreamError,
    UserInputError,
)


class JsonRpcBlockSource:
    """
    JSON-RPC block source (eth_* methods over HTTP).

    Notes:
    - One short-lived AsyncClient per call, so the source can be shared by
      concurrent workers and reused across event loops (Flask views run
      each request in a fresh asyncio.run).
    - transport is injectable for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url:
            raise UserInputError("RPC_URL is not configured")
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._next_id = 0

    @classmethod
    def from_config(cls, cfg) -> "JsonRpcBlockSource":
        return cls(cfg.url, timeout=cfg.timeout)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def rpc(self, method: str, params: list) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as c:
                r = await c.post(self.url, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                raise TransientUpstreamError(f"{method}: too many requests", status=status) from e
            raise UpstreamError(f"{method}: http error", status=status) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"{method}: transport error {e!r}") from e
        except ValueError as e:
            raise PermanentUpstreamError(f"{method}: invalid json body") from e

        if not isinstance(data, dict):
            raise PermanentUpstreamError(f"{method}: unexpected response {type(data).__name__}")

        err = data.get("error")
        if err:
            code = err.get("code") if isinstance(err, dict) else None
            message = err.get("message", "") if isinstance(err, dict) else str(err)
            raise UpstreamError(f"{method}: {message}", code=code)

        return data.get("result")

    # ------------------------------------------------------------------
    # BlockSource
    # ------------------------------------------------------------------
    async def current_height(self) -> int:
        return hex_quantity(await self.rpc("eth_blockNumber", []))

    async def get_block_by_height(self, height: int) -> Optional[BlockRecord]:
        return self._to_block(await self.rpc("eth_getBlockByNumber", [hex(height), False]))

    async def get_latest(self) -> Optional[BlockRecord]:
        return self._to_block(await self.rpc("eth_getBlockByNumber", ["latest", False]))

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------
    async def chain_id(self) -> int:
        return hex_quantity(await self.rpc("eth_chainId", []))

    async def max_priority_fee_per_gas(self) -> int:
        """Node-suggested priority tip (wei)."""
        return hex_quantity(await self.rpc("eth_maxPriorityFeePerGas", []))

    @staticmethod
    def _to_block(result: Any) -> Optional[BlockRecord]:
        if result is None:
            return None
        try:
            return BlockRecord.from_rpc(result)
        except (KeyError, TypeError, ValueError) as e:
            logs.warning(f"[JsonRpcBlockSource] malformed block payload: {e!r}")
            raise PermanentUpstreamError(f"malformed block payload: {e!r}") from e
