from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from feecast.chain.types import BlockRecord
from feecast.observability.metrics import LAST_BASE_FEE, MetricRecorder

FEATURE_COLUMNS = ("prev_base_fee_gwei", "gas_used_ratio")
LABEL_COLUMN = "label"


@dataclass(frozen=True)
class Sample:
    features: Tuple[float, ...]
    label: float


class DatasetBuildEngine:
    """
    DatasetBuildEngine（FINAL / FROZEN）

    Responsibility:
    - Turn an ordered block window into (features, label) samples
    - Own ALL dataset construction semantics:
        - adjacent-pair differencing (index order, NOT height adjacency)
        - base-fee presence filtering
        - wei → gwei conversion

    Contract (FROZEN):
    - build() is pure and deterministic; empty / single block → []
    - features = (prev base fee gwei, prev gas used ratio)
    - label    = current base fee gwei
    - the latest observed base fee is reported to the sink once per call
    """

    def __init__(self, metrics: Optional[MetricRecorder] = None):
        self.metrics = metrics

    # ======================================================================
    # Public API
    # ======================================================================
    def build(self, blocks: Sequence[BlockRecord]) -> List[Sample]:
        samples: List[Sample] = []

        for prev, curr in zip(blocks, blocks[1:]):
            sample = self._pair_to_sample(prev, curr)
            if sample is not None:
                samples.append(sample)

        latest = latest_base_fee_gwei(blocks)
        if latest is not None and self.metrics is not None:
            self.metrics.set_gauge(LAST_BASE_FEE, latest)

        return samples

    # ------------------------------------------------------------------
    # Pair-level logic (atomic & testable)
    # ------------------------------------------------------------------
    @staticmethod
    def _pair_to_sample(prev: BlockRecord, curr: BlockRecord) -> Optional[Sample]:
        prev_fee = prev.base_fee_gwei
        curr_fee = curr.base_fee_gwei
        if prev_fee is None or curr_fee is None:
            return None

        return Sample(features=(prev_fee, prev.gas_used_ratio), label=curr_fee)


def features_from_block(block: BlockRecord) -> Optional[Tuple[float, ...]]:
    """Inference-time features of the next block, derived from ``block``."""
    # a zero base fee is treated as not available yet
    if not block.base_fee_per_gas:
        return None
    return (block.base_fee_gwei, block.gas_used_ratio)


def latest_base_fee_gwei(blocks: Sequence[BlockRecord]) -> Optional[float]:
    for block in reversed(blocks):
        fee = block.base_fee_gwei
        if fee is not None:
            return fee
    return None


def samples_frame(samples: Sequence[Sample]) -> pd.DataFrame:
    rows = [
        {**dict(zip(FEATURE_COLUMNS, s.features)), LABEL_COLUMN: s.label}
        for s in samples
    ]
    return pd.DataFrame(rows, columns=[*FEATURE_COLUMNS, LABEL_COLUMN])
