# feecast/training/steps/fetch_blocks_step.py
from __future__ import annotations

from feecast import logs
from feecast.chain.range_fetch_engine import RangeFetchEngine
from feecast.pipeline.step import PipelineStep
from feecast.training.context import TrainingContext


class FetchBlocksStep(PipelineStep):
    """
    FetchBlocksStep（FINAL）

    Contract:
    - consumes ctx.block_window / ctx.block_step / ctx.end_height (optional)
    - produces ctx.blocks (ascending by height, absent heights omitted)
    """

    def __init__(self, engine: RangeFetchEngine, inst=None):
        super().__init__(inst)
        self.engine = engine

    async def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.timed():
            if ctx.end_height is None:
                blocks = await self.engine.fetch_recent(ctx.block_window, ctx.block_step)
            else:
                blocks = await self.engine.fetch_range(
                    ctx.end_height, ctx.block_window, ctx.block_step
                )

        if not blocks:
            logs.warning(f"[{self.step_name}] run_id={ctx.run_id} no blocks fetched")

        ctx.blocks = blocks
        return ctx
