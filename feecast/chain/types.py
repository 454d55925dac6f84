# feecast/chain/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

WEI_PER_GWEI = 10**9


def wei_to_gwei(wei: int) -> float:
    # int / int true division is correctly rounded
    return wei / WEI_PER_GWEI


def hex_quantity(value: Any) -> int:
    """Decode a JSON-RPC quantity (hex string) or a plain int."""
    if isinstance(value, str):
        return int(value, 16)
    return int(value)


@dataclass(frozen=True)
class BlockRecord:
    """
    BlockRecord（immutable）

    - height           : block number
    - base_fee_per_gas : wei, None before the fee-market fork
    - gas_used / gas_limit : work units
    """

    height: int
    base_fee_per_gas: Optional[int]
    gas_used: int
    gas_limit: int

    @property
    def base_fee_gwei(self) -> Optional[float]:
        if self.base_fee_per_gas is None:
            return None
        return wei_to_gwei(self.base_fee_per_gas)

    @property
    def gas_used_ratio(self) -> float:
        # not clamped; > 1 only on inconsistent upstream data
        return self.gas_used / max(1, self.gas_limit)

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> "BlockRecord":
        base_fee = payload.get("baseFeePerGas")
        return cls(
            height=hex_quantity(payload["number"]),
            base_fee_per_gas=hex_quantity(base_fee) if base_fee is not None else None,
            gas_used=hex_quantity(payload.get("gasUsed", 0)),
            gas_limit=hex_quantity(payload.get("gasLimit", 0)),
        )


class BlockSource(Protocol):
    """
    Upstream block source contract.

    Every call may raise an UpstreamError; throttling is told apart from
    other failures by the retry classifier, not by the source itself.
    """

    async def current_height(self) -> int:
        ...

    async def get_block_by_height(self, height: int) -> Optional[BlockRecord]:
        ...

    async def get_latest(self) -> Optional[BlockRecord]:
        ...
