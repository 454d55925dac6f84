# tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from typing import Dict, Iterable, List, Optional

import pytest
from loguru import logger

from feecast.chain.types import WEI_PER_GWEI, BlockRecord
from feecast.utils.errors import UpstreamError


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


def make_block(
        height: int,
        base_fee_gwei: Optional[float] = 10.0,
        gas_used: int = 15_000_000,
        gas_limit: int = 30_000_000,
) -> BlockRecord:
    return BlockRecord(
        height=height,
        base_fee_per_gas=None if base_fee_gwei is None else int(round(base_fee_gwei * WEI_PER_GWEI)),
        gas_used=gas_used,
        gas_limit=gas_limit,
    )


def make_fee_market_chain(start: int, count: int, base_fee_gwei: float = 20.0) -> List[BlockRecord]:
    """
    Blocks following the EIP-1559 update rule with a deterministic,
    varying gas-used ratio (so every feature column moves).
    """
    ratios = [0.15, 0.9, 0.4, 0.75, 0.55, 0.3, 0.95, 0.05, 0.6, 0.45]
    gas_limit = 30_000_000

    blocks = []
    fee = base_fee_gwei
    for i in range(count):
        ratio = ratios[i % len(ratios)]
        blocks.append(make_block(start + i, fee, int(ratio * gas_limit), gas_limit))
        fee = fee * (1 + 0.125 * (2 * ratio - 1))
    return blocks


class FakeBlockSource:
    """
    In-memory BlockSource.

    - failures[h]    : errors raised in order before the height succeeds
    - always_fail[h] : error raised on every attempt
    - delays[h]      : seconds to await before answering
    """

    def __init__(
            self,
            blocks: Iterable[BlockRecord] = (),
            *,
            head: Optional[int] = None,
            failures: Optional[Dict[int, List[Exception]]] = None,
            always_fail: Optional[Dict[int, Exception]] = None,
            fail_every: Optional[Exception] = None,
            delays: Optional[Dict[int, float]] = None,
            latest: Optional[BlockRecord] = None,
            chain_id: int = 1,
            priority_fee_wei: Optional[int] = 1_500_000_000,
    ):
        self.blocks = {b.height: b for b in blocks}
        self.head = head if head is not None else max(self.blocks, default=0)
        self.failures = {h: list(errs) for h, errs in (failures or {}).items()}
        self.always_fail = dict(always_fail or {})
        self.fail_every = fail_every
        self.delays = dict(delays or {})
        self.latest = latest
        self._chain_id = chain_id
        self.priority_fee_wei = priority_fee_wei

        self.calls: Counter = Counter()
        self.in_flight = 0
        self.max_in_flight = 0

    async def current_height(self) -> int:
        return self.head

    async def get_block_by_height(self, height: int) -> Optional[BlockRecord]:
        self.calls[height] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(height)
            if delay:
                await asyncio.sleep(delay)

            if self.fail_every is not None:
                raise self.fail_every
            if height in self.always_fail:
                raise self.always_fail[height]
            pending = self.failures.get(height)
            if pending:
                raise pending.pop(0)
            return self.blocks.get(height)
        finally:
            self.in_flight -= 1

    async def get_latest(self) -> Optional[BlockRecord]:
        if self.latest is not None:
            return self.latest
        return self.blocks.get(self.head)

    async def chain_id(self) -> int:
        return self._chain_id

    async def max_priority_fee_per_gas(self) -> int:
        if self.priority_fee_wei is None:
            raise UpstreamError("the method eth_maxPriorityFeePerGas does not exist", code=-32601)
        return self.priority_fee_wei


@pytest.fixture
def fee_chain() -> List[BlockRecord]:
    return make_fee_market_chain(start=1000, count=40)
