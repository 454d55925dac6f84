from __future__ import annotations

from typing import Any

from feecast.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline Step 基类（最终冻结版）

    职责（唯一）：
      1. 作为 orchestration 层（调度 / 条件执行）
      2. 提供 Step 级时间语义边界（parent scope）

    设计铁律：
      - Step 本身不进入 timeline
      - 所有可观测性能必须发生在 Step 内部（leaf timer）
      - Instrumentation 是可选横切关注点
      - Step 行为不依赖 inst 是否存在
      - run() is a coroutine; steps without I/O simply never await
    """

    def __init__(self, inst: Instrumentation | None = None):
        # 永远保证 inst 可用（No-op 语义）
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        """默认使用类名作为 Step 名称。"""
        return self.__class__.__name__

    def timed(self):
        """
        Step 级时间语义边界（父级 scope, record=False）
        """
        return self.inst.timer(self.step_name, record=False)

    async def run(self, ctx: Any) -> Any:
        raise NotImplementedError
