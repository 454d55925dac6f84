# feecast/training/steps/dataset_build_step.py
from __future__ import annotations

from feecast import logs
from feecast.pipeline.step import PipelineStep
from feecast.training.context import TrainingContext
from feecast.training.engines.dataset_build_engine import DatasetBuildEngine


class DatasetBuildStep(PipelineStep):
    """
    DatasetBuildStep（FINAL）

    Semantics:
    - Step MUST NOT perform any dataset logic (engine owns it)
    - blocks are released once samples exist
    """

    def __init__(self, engine: DatasetBuildEngine, inst=None):
        super().__init__(inst)
        self.engine = engine

    async def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.timed():
            ctx.samples = self.engine.build(ctx.blocks)

        logs.info(
            f"[{self.step_name}] blocks={len(ctx.blocks)} samples={len(ctx.samples)}"
        )
        ctx.blocks = []
        return ctx
