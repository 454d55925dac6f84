# feecast/workflows/fee_training.py
from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass

from feecast import logs
from feecast.chain.range_fetch_engine import RangeFetchEngine
from feecast.chain.rpc_source import JsonRpcBlockSource
from feecast.chain.types import BlockSource
from feecast.config.app_config import AppConfig
from feecast.observability.instrumentation import Instrumentation
from feecast.services.fee_service import FeeService
from feecast.training.engines.dataset_build_engine import DatasetBuildEngine
from feecast.training.engines.ols_train_engine import OlsTrainEngine
from feecast.training.model_store import ModelStore
from feecast.training.pipeline import TrainingPipeline
from feecast.training.steps.dataset_build_step import DatasetBuildStep
from feecast.training.steps.fetch_blocks_step import FetchBlocksStep
from feecast.training.steps.model_publish_step import ModelPublishStep
from feecast.training.steps.model_train_step import ModelTrainStep


def build_fee_training(
        cfg: AppConfig,
        source: BlockSource,
        store: ModelStore,
        inst: Instrumentation,
) -> TrainingPipeline:
    """
    Fee Training Workflow (FINAL / FROZEN)

    NOTE:
    - This function MUST NOT call .run()
    - It ONLY wires engines into steps
    """
    fetch_engine = RangeFetchEngine.from_config(source, cfg.fetch, inst=inst)

    return TrainingPipeline(
        steps=[
            FetchBlocksStep(fetch_engine, inst=inst),
            DatasetBuildStep(DatasetBuildEngine(metrics=inst.metrics), inst=inst),
            ModelTrainStep(OlsTrainEngine(), inst=inst),
            ModelPublishStep(store, inst=inst),
        ],
        inst=inst,
        cfg=cfg.fetch,
    )


class PeriodicTrainer:
    """
    Re-run the training pipeline every ``interval`` seconds on a daemon
    thread. A failed refresh is logged; the published model stays.
    """

    def __init__(self, pipeline: TrainingPipeline, interval: float):
        self.pipeline = pipeline
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self.interval <= 0 or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="periodic-trainer", daemon=True)
        self._thread.start()
        logs.info(f"[PeriodicTrainer] started interval={self.interval}s")

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                summary = asyncio.run(self.pipeline.bootstrap())
                logs.info(f"[PeriodicTrainer] refresh {summary.to_dict()}")
            except Exception:
                logs.exception("[PeriodicTrainer] refresh failed")


@dataclass
class FeeRuntime:
    """Everything one process needs, wired once at bootstrap."""

    cfg: AppConfig
    source: BlockSource
    store: ModelStore
    inst: Instrumentation
    trainer: TrainingPipeline
    service: FeeService


def build_fee_runtime(cfg: AppConfig, source: BlockSource | None = None) -> FeeRuntime:
    if source is None:
        source = JsonRpcBlockSource.from_config(cfg.rpc)

    store = ModelStore()
    inst = Instrumentation()
    trainer = build_fee_training(cfg, source, store, inst)
    service = FeeService(source, store, cfg.model, inst=inst)

    return FeeRuntime(
        cfg=cfg,
        source=source,
        store=store,
        inst=inst,
        trainer=trainer,
        service=service,
    )
