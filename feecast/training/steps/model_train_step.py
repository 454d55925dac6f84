# feecast/training/steps/model_train_step.py
from __future__ import annotations

from feecast.observability.metrics import FIT, TRAIN_SAMPLES_USED
from feecast.pipeline.step import PipelineStep
from feecast.training.context import TrainingContext
from feecast.training.engines.ols_train_engine import OlsTrainEngine


class ModelTrainStep(PipelineStep):
    """
    ModelTrainStep（BATCH / FINAL）

    Contract:
    - consumes ctx.samples
    - produces ctx.result (TrainResult; model only when status is OK)
    """

    def __init__(self, engine: OlsTrainEngine | None = None, inst=None):
        super().__init__(inst)
        self.engine = engine if engine is not None else OlsTrainEngine()

    async def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.inst.timer(FIT):
            ctx.result = self.engine.fit(ctx.samples)

        self.inst.metrics.record(TRAIN_SAMPLES_USED, ctx.result.metrics.get("used", 0))
        return ctx
