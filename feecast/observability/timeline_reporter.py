#!filepath: feecast/observability/timeline_reporter.py
from typing import Dict

from feecast import logs


class TimelineReporter:
    """
    Training run timeline 报告：
    - leaf scope → 耗时秒数
    """

    def __init__(self, timeline: Dict[str, float], run_id: str):
        self.timeline = timeline
        self.run_id = run_id

    def print(self):
        logs.info(f"[Timeline] ===== Training timeline for {self.run_id} =====")

        total = 0.0
        for name, sec in self.timeline.items():
            logs.info(f"[Timeline] {str(name):<30} {sec:>8.3f}s")
            total += sec

        logs.info(f"[Timeline] Total{'':<27} {total:>8.3f}s")
        logs.info("[Timeline] ===========================================")
