#!filepath: feecast/observability/instrumentation.py
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Optional

from feecast.observability.metrics import MetricRecorder
from feecast.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Instrumentation（Leaf-only accounting + Parent scope）。

    设计铁律：
    1. Timeline 只记录【叶子节点】（record=True），且只属于当前训练 run
    2. 叶子节点同时作为 duration sample 写入 MetricRecorder
    3. record=False 的 timer 不产生任何副作用
    4. 请求路径（predict）用 sample()，只进 metrics，不进 timeline
    5. Instrumentation 本身不在热路径打日志
    """

    enabled: bool = True
    metrics: Optional[MetricRecorder] = None
    timeline: Dict[str, float] = field(default_factory=OrderedDict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self):
        if self.metrics is None:
            self.metrics = MetricRecorder(enabled=self.enabled)

    def timer(self, name: str, *, record: bool = True):
        """
        Context-manager timer.

        Parameters
        ----------
        name : str
            计时名称（同时是 metrics 中的 duration 名称）
        record : bool
            - True  : 叶子节点，记录到 timeline + metrics
            - False : 父级 scope，仅定义 wall-time（不产生副作用）
        """
        return self._measure(name, record=record, timeline=True)

    def sample(self, name: str):
        """Duration sample for the metrics recorder only (request path)."""
        return self._measure(name, record=True, timeline=False)

    def _measure(self, name: str, *, record: bool, timeline: bool):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled or not record:
                yield
                return

            start = time.perf_counter()
            try:
                yield
            finally:
                elapsed = time.perf_counter() - start
                if timeline:
                    with inst._lock:
                        inst.timeline[name] = elapsed
                inst.metrics.observe(name, elapsed)

        return _ctx()

    def reset_timeline(self) -> None:
        """Start a fresh timeline (one per training run)."""
        with self._lock:
            self.timeline.clear()

    def timeline_snapshot(self) -> Dict[str, float]:
        with self._lock:
            return OrderedDict(self.timeline)

    def generate_timeline_report(self, run_id: str):
        TimelineReporter(self.timeline_snapshot(), run_id).print()


class NoOpInstrumentation:
    """Instrumentation disabled 时使用。"""

    def __init__(self):
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def sample(self, name: str):
        return _NoOpTimer()

    def reset_timeline(self) -> None:
        pass

    def timeline_snapshot(self) -> Dict[str, float]:
        return {}

    def generate_timeline_report(self, run_id: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
