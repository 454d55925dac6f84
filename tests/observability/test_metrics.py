#!filepath: tests/observability/test_metrics.py

from feecast.observability.metrics import (
    FETCH_BATCH,
    FIT,
    LAST_BASE_FEE,
    LAST_TRAIN_MSE,
    PREDICT,
    MetricRecorder,
)


def test_metric_record():
    m = MetricRecorder(enabled=True)
    m.record("latency_ms", 123)

    assert "latency_ms" in m.metrics
    assert m.metrics["latency_ms"] == 123


def test_observe_known_durations():
    m = MetricRecorder()
    m.observe(FETCH_BATCH, 0.7)
    m.observe(FIT, 0.02)
    m.observe(PREDICT, 0.5)

    text = m.export().decode()

    assert "pipeline_fetch_blocks_seconds_count 1.0" in text
    assert "pipeline_train_seconds_count 1.0" in text
    # stored in ms
    assert "pipeline_inference_ms_sum 500.0" in text


def test_gauges_exported():
    m = MetricRecorder()
    m.set_gauge(LAST_BASE_FEE, 12.5)
    m.set_gauge(LAST_TRAIN_MSE, 0.25)

    text = m.export().decode()

    assert "chain_last_base_fee_gwei 12.5" in text
    assert "pipeline_last_train_loss 0.25" in text
    assert m.metrics[LAST_BASE_FEE] == 12.5


def test_unknown_names_never_raise():
    m = MetricRecorder()
    m.observe("no_such_duration", 1.0)
    m.set_gauge("no_such_gauge", 1.0)

    assert "no_such_duration" not in m.metrics
    assert "no_such_gauge" not in m.metrics


def test_disabled_recorder_is_silent():
    m = MetricRecorder(enabled=False)
    m.record("rows", 1)
    m.observe(FIT, 1.0)
    m.set_gauge(LAST_BASE_FEE, 1.0)

    assert m.metrics == {}
    assert "pipeline_train_seconds_count 0.0" in m.export().decode()


def test_recorders_do_not_share_registry():
    a, b = MetricRecorder(), MetricRecorder()
    a.set_gauge(LAST_BASE_FEE, 99.0)

    assert "chain_last_base_fee_gwei 99.0" not in b.export().decode()


def test_default_process_and_runtime_series_exported():
    text = MetricRecorder().export().decode()

    assert "python_info" in text
    assert "python_gc_objects_collected_total" in text
