#!filepath: tests/observability/test_instrumentation.py

import threading
import time

from loguru import logger

from feecast.observability.instrumentation import Instrumentation, NoOpInstrumentation
from feecast.observability.metrics import FIT
from feecast.observability.timeline_reporter import TimelineReporter


def test_instrumentation_timer():
    inst = Instrumentation(enabled=True)

    with inst.timer("step_A"):
        time.sleep(0.01)

    assert "step_A" in inst.timeline
    assert inst.timeline["step_A"] > 0


def test_timer_feeds_metrics():
    inst = Instrumentation(enabled=True)

    with inst.timer(FIT):
        pass

    assert inst.metrics.metrics[FIT] == inst.timeline[FIT]


def test_parent_scope_not_recorded():
    inst = Instrumentation(enabled=True)

    with inst.timer("parent", record=False):
        with inst.timer("leaf"):
            pass

    assert list(inst.timeline) == ["leaf"]


def test_timer_records_on_exception():
    inst = Instrumentation(enabled=True)

    try:
        with inst.timer("failing"):
            raise RuntimeError("x")
    except RuntimeError:
        pass

    assert "failing" in inst.timeline


def test_disabled_instrumentation():
    inst = Instrumentation(enabled=False)

    with inst.timer("step_A"):
        pass

    assert inst.timeline == {}
    assert inst.metrics.metrics == {}


def test_noop_instrumentation():
    inst = NoOpInstrumentation()

    with inst.timer("anything"):
        pass

    inst.generate_timeline_report("r")
    assert inst.timeline == {}


def test_generate_timeline_report():
    inst = Instrumentation(enabled=True)

    with inst.timer("phase_X"):
        time.sleep(0.005)

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))

    inst.generate_timeline_report("run-42")

    logger.remove(sink_id)

    output = "\n".join(captured)

    assert "Training timeline for run-42" in output
    assert "phase_X" in output


def test_timeline_reporter_total():
    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))

    TimelineReporter({"fetch": 1.25, "fit": 0.5}, "r1").print()

    logger.remove(sink_id)
    output = "\n".join(captured)

    assert "1.250s" in output
    assert "1.750s" in output


def test_sample_feeds_metrics_only():
    inst = Instrumentation(enabled=True)

    with inst.sample(FIT):
        pass

    assert inst.timeline == {}
    assert FIT in inst.metrics.metrics


def test_reset_timeline_starts_fresh():
    inst = Instrumentation(enabled=True)

    with inst.timer("old_run_leaf"):
        pass
    inst.reset_timeline()
    with inst.timer("new_run_leaf"):
        pass

    assert list(inst.timeline) == ["new_run_leaf"]


def test_timeline_snapshot_is_a_copy():
    inst = Instrumentation(enabled=True)

    with inst.timer("a"):
        pass
    snap = inst.timeline_snapshot()
    with inst.timer("b"):
        pass

    assert list(snap) == ["a"]
    assert list(inst.timeline) == ["a", "b"]


def test_report_while_request_threads_add_entries():
    inst = Instrumentation(enabled=True)
    for i in range(200):
        inst.timeline[f"leaf_{i}"] = 0.001

    stop = threading.Event()

    def writer():
        n = 0
        while not stop.is_set():
            with inst.timer(f"extra_{n}"):
                pass
            n += 1

    t = threading.Thread(target=writer)
    t.start()
    try:
        for _ in range(50):
            inst.generate_timeline_report("r")
    finally:
        stop.set()
        t.join()


def test_noop_sample_and_reset():
    inst = NoOpInstrumentation()

    with inst.sample("anything"):
        pass
    inst.reset_timeline()

    assert inst.timeline_snapshot() == {}
