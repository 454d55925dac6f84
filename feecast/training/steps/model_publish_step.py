# feecast/training/steps/model_publish_step.py
from __future__ import annotations

from feecast import logs
from feecast.observability.metrics import LAST_TRAIN_MSE
from feecast.pipeline.step import PipelineStep
from feecast.training.context import TrainingContext
from feecast.training.model_store import ModelStore


class ModelPublishStep(PipelineStep):
    """
    ModelPublishStep（FINAL / FROZEN）

    Semantics:
    - OK result → swap into the ModelStore
    - any other status → store untouched (previous model stays valid)
    """

    def __init__(self, store: ModelStore, inst=None):
        super().__init__(inst)
        self.store = store

    async def run(self, ctx: TrainingContext) -> TrainingContext:
        result = ctx.result

        if result is None or not result.ok:
            status = result.status.value if result is not None else "no-result"
            logs.warning(
                f"[{self.step_name}] run_id={ctx.run_id} {status} -> keep previous model "
                f"(ready={self.store.ready})"
            )
            ctx.published = False
            return ctx

        self.store.set(result.model)
        self.inst.metrics.set_gauge(LAST_TRAIN_MSE, result.model.train_mse)
        ctx.published = True

        logs.info(
            f"[{self.step_name}] run_id={ctx.run_id} published {result.model.to_dict()}"
        )
        return ctx
