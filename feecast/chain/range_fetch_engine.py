# feecast/chain/range_fetch_engine.py
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from feecast import logs
from feecast.chain.rate_limit import is_rate_limited
from feecast.chain.types import BlockRecord, BlockSource
from feecast.observability.instrumentation import Instrumentation, NoOpInstrumentation
from feecast.observability.metrics import FETCH_BATCH
from feecast.utils.retry import AsyncRetry

MAX_BACKOFF_SECONDS = 5.0


def target_heights(end_height: int, desired_count: int, step: int = 1) -> List[int]:
    """
    Heights to fetch for a window ending at ``end_height``.

    start = max(0, end - count + 1); then every ``step``-th height up to end.
    """
    start = max(0, end_height - desired_count + 1)
    return list(range(start, end_height + 1, step))


class RangeFetchEngine:
    """
    RangeFetchEngine（bounded fan-out / ordered fan-in）

    Semantics:
    - fixed pool of ``concurrency`` worker tasks drains one shared queue
    - each height is retried only while ``retry_if`` classifies the error as
      throttling and the budget lasts (max_retries + 1 attempts in total)
    - a failed height leaves its slot empty; the batch never fails for it
    - result is sorted ascending by height, whatever the completion order

    Contract:
    - raises ValueError on invalid arguments only
    """

    def __init__(
        self,
        source: BlockSource,
        *,
        concurrency: int = 2,
        max_retries: int = 5,
        initial_backoff: float = 0.3,
        max_backoff: float = MAX_BACKOFF_SECONDS,
        retry_if: Callable[[BaseException], bool] = is_rate_limited,
        inst: Optional[Instrumentation] = None,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        if initial_backoff < 0:
            raise ValueError(f"initial_backoff must be >= 0, got {initial_backoff}")

        self.source = source
        self.concurrency = concurrency
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.retry_if = retry_if
        self.inst = inst if inst is not None else NoOpInstrumentation()

    @classmethod
    def from_config(
        cls,
        source: BlockSource,
        cfg,
        *,
        inst: Optional[Instrumentation] = None,
    ) -> "RangeFetchEngine":
        return cls(
            source,
            concurrency=cfg.max_concurrency,
            max_retries=cfg.max_retries,
            initial_backoff=cfg.initial_backoff,
            max_backoff=cfg.max_backoff,
            inst=inst,
        )

    # ======================================================================
    # Public API
    # ======================================================================
    async def fetch_recent(self, desired_count: int, step: int = 1) -> List[BlockRecord]:
        """Fetch the window ending at the source's current height."""
        end_height = await self._with_retry(self.source.current_height)
        return await self.fetch_range(end_height, desired_count, step)

    async def fetch_range(
        self,
        end_height: int,
        desired_count: int,
        step: int = 1,
    ) -> List[BlockRecord]:
        if end_height < 0:
            raise ValueError(f"end_height must be >= 0, got {end_height}")
        if desired_count < 1:
            raise ValueError(f"desired_count must be >= 1, got {desired_count}")
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")

        heights = target_heights(end_height, desired_count, step)

        # pre-sized: each slot is written only by the worker that claimed it
        slots: List[Optional[BlockRecord]] = [None] * len(heights)

        queue: asyncio.Queue = asyncio.Queue()
        for slot, height in enumerate(heights):
            queue.put_nowait((slot, height))

        async def worker() -> None:
            while True:
                try:
                    slot, height = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                slots[slot] = await self._fetch_one(height)

        workers = min(self.concurrency, len(heights))
        with self.inst.timer(FETCH_BATCH):
            await asyncio.gather(*(worker() for _ in range(workers)))

        blocks = sorted((b for b in slots if b is not None), key=lambda b: b.height)

        logs.info(
            f"[RangeFetch] end={end_height} count={desired_count} step={step} "
            f"workers={workers} fetched={len(blocks)}/{len(heights)}"
        )
        return blocks

    # ======================================================================
    # Internal
    # ======================================================================
    async def _fetch_one(self, height: int) -> Optional[BlockRecord]:
        try:
            return await self._with_retry(self.source.get_block_by_height, height)
        except Exception as e:
            kind = "rate-limited" if self.retry_if(e) else "failed"
            logs.warning(f"[RangeFetch] height={height} {kind}, skipped: {e!r}")
            return None

    async def _with_retry(self, func, *args):
        return await AsyncRetry.run(
            func,
            *args,
            retry_if=self.retry_if,
            max_attempts=self.max_retries + 1,
            delay=self.initial_backoff,
            backoff=2.0,
            max_delay=self.max_backoff,
            jitter=False,
        )
