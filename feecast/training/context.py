# feecast/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from feecast.chain.types import BlockRecord
from feecast.training.engines.dataset_build_engine import Sample
from feecast.training.train_result import TrainResult


@dataclass
class TrainingContext:
    """
    TrainingContext（FINAL / FROZEN）

    Semantics:
    - One context == one training run
    - run_id is immutable and mandatory
    - blocks / samples are owned by this run and dropped with it
    """

    # -------------------------
    # Identity (FROZEN)
    # -------------------------
    run_id: str

    # -------------------------
    # Static bindings
    # -------------------------
    cfg: Any
    inst: Any

    # -------------------------
    # Window
    # -------------------------
    block_window: int = 0
    block_step: int = 1
    end_height: Optional[int] = None

    # -------------------------
    # Rolling state
    # -------------------------
    blocks: List[BlockRecord] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)
    result: Optional[TrainResult] = None
    published: bool = False
