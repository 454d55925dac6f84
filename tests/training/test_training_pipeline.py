#!filepath: tests/training/test_training_pipeline.py
import asyncio

import pytest

from feecast.config.app_config import AppConfig
from feecast.config.fetch_config import FetchConfig
from feecast.observability.instrumentation import Instrumentation
from feecast.observability.metrics import (
    FETCH_BATCH,
    FIT,
    LAST_BASE_FEE,
    LAST_TRAIN_MSE,
    TRAIN_SAMPLES_USED,
)
from feecast.training.model_store import ModelStore
from feecast.training.train_result import FitStatus
from feecast.utils.errors import TransientUpstreamError
from feecast.workflows.fee_training import build_fee_training
from tests.conftest import FakeBlockSource


@pytest.fixture
def cfg():
    return AppConfig(fetch=FetchConfig(block_window=30, max_retries=0, backoff_ms=0))


def _pipeline(cfg, source, store=None, inst=None):
    store = store if store is not None else ModelStore()
    inst = inst if inst is not None else Instrumentation()
    return build_fee_training(cfg, source, store, inst), store, inst


def test_bootstrap_publishes_model(cfg, fee_chain):
    pipeline, store, _ = _pipeline(cfg, FakeBlockSource(fee_chain))

    summary = asyncio.run(pipeline.bootstrap())

    assert summary.published
    assert summary.status is FitStatus.OK
    assert summary.samples == 29
    assert summary.mse is not None and summary.mse >= 0
    assert store.ready
    assert store.get().dimension == 2


def test_run_context_drops_blocks_after_dataset(cfg, fee_chain):
    pipeline, _, _ = _pipeline(cfg, FakeBlockSource(fee_chain))

    ctx = asyncio.run(pipeline.run(run_id="r1"))

    assert ctx.run_id == "r1"
    assert ctx.blocks == []
    assert len(ctx.samples) == 29
    assert ctx.result.ok


def test_explicit_end_height_and_window(cfg, fee_chain):
    source = FakeBlockSource(fee_chain)
    pipeline, _, _ = _pipeline(cfg, source)

    summary = asyncio.run(pipeline.bootstrap(block_window=10, end_height=1020))

    assert summary.samples == 9
    assert set(source.calls) == set(range(1011, 1021))


def test_failed_fit_keeps_previous_model(cfg, fee_chain):
    pipeline, store, _ = _pipeline(cfg, FakeBlockSource(fee_chain))
    asyncio.run(pipeline.bootstrap())
    first = store.get()

    summary = asyncio.run(pipeline.bootstrap(block_window=3))

    assert summary.status is FitStatus.INSUFFICIENT_DATA
    assert not summary.published
    assert summary.mse is None
    assert store.get() is first


def test_throttled_upstream_yields_no_model(cfg, fee_chain):
    source = FakeBlockSource(fee_chain, fail_every=TransientUpstreamError("429"))
    pipeline, store, _ = _pipeline(cfg, source)

    summary = asyncio.run(pipeline.bootstrap())

    assert summary.samples == 0
    assert summary.status is FitStatus.INSUFFICIENT_DATA
    assert not store.ready


def test_metrics_recorded(cfg, fee_chain):
    pipeline, store, inst = _pipeline(cfg, FakeBlockSource(fee_chain))
    asyncio.run(pipeline.bootstrap())

    recorded = inst.metrics.metrics
    assert FETCH_BATCH in recorded
    assert FIT in recorded
    assert recorded[TRAIN_SAMPLES_USED] == 29
    assert recorded[LAST_TRAIN_MSE] == pytest.approx(store.get().train_mse)
    assert recorded[LAST_BASE_FEE] == pytest.approx(fee_chain[-1].base_fee_gwei)

    # step-level scopes never enter the timeline
    assert set(inst.timeline) == {FETCH_BATCH, FIT}


def test_each_run_reports_only_its_own_timeline(cfg, fee_chain):
    inst = Instrumentation()
    pipeline, _, _ = _pipeline(cfg, FakeBlockSource(fee_chain), inst=inst)

    inst.timeline["left_over_from_earlier"] = 1.0
    with inst.sample("predict"):
        pass

    asyncio.run(pipeline.bootstrap())

    assert set(inst.timeline) == {FETCH_BATCH, FIT}
