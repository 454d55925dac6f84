# feecast/training/pipeline.py
from __future__ import annotations

import uuid
from typing import List, Optional

from feecast import logs
from feecast.config.fetch_config import FetchConfig
from feecast.observability.instrumentation import Instrumentation
from feecast.pipeline.step import PipelineStep
from feecast.training.context import TrainingContext
from feecast.training.train_result import FitStatus, TrainSummary


class TrainingPipeline:
    """
    TrainingPipeline（FINAL / FROZEN）

    Semantics:
    - One run = fetch window → samples → fit → publish
    - Pipeline owns the context; steps execute semantics
    - Pipeline does no step-level timing
    """

    def __init__(
            self,
            *,
            steps: List[PipelineStep],
            inst: Instrumentation,
            cfg: FetchConfig,
    ):
        self.steps = steps
        self.inst = inst
        self.cfg = cfg

    async def run(
            self,
            *,
            block_window: Optional[int] = None,
            end_height: Optional[int] = None,
            run_id: Optional[str] = None,
    ) -> TrainingContext:
        run_id = run_id or uuid.uuid4().hex[:10]
        logs.info(f"[TrainingPipeline] START run_id={run_id}")

        # timeline belongs to this run only
        self.inst.reset_timeline()

        ctx = TrainingContext(
            run_id=run_id,
            cfg=self.cfg,
            inst=self.inst,
            block_window=block_window or self.cfg.block_window,
            block_step=self.cfg.block_step,
            end_height=end_height,
        )

        for step in self.steps:
            ctx = await step.run(ctx)

        self.inst.generate_timeline_report(run_id)
        logs.info(f"[TrainingPipeline] DONE run_id={run_id}")
        return ctx

    async def bootstrap(
            self,
            *,
            block_window: Optional[int] = None,
            end_height: Optional[int] = None,
    ) -> TrainSummary:
        """Run once and summarise; the caller decides what to do on failure."""
        ctx = await self.run(block_window=block_window, end_height=end_height)

        result = ctx.result
        status = result.status if result is not None else FitStatus.INSUFFICIENT_DATA
        mse = result.model.train_mse if result is not None and result.ok else None

        return TrainSummary(
            run_id=ctx.run_id,
            samples=len(ctx.samples),
            status=status,
            mse=mse,
            published=ctx.published,
        )
