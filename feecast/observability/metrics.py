#!filepath: feecast/observability/metrics.py
from dataclasses import dataclass, field
from typing import Any, Dict

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    GCCollector,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

from feecast import logs

# duration samples
FETCH_BATCH = "fetch_batch"
FIT = "fit"
PREDICT = "predict"

# plain values
TRAIN_SAMPLES_USED = "train_samples_used"

# gauges
LAST_BASE_FEE = "last_base_fee_gwei"
LAST_TRAIN_MSE = "last_train_mse"


@dataclass
class MetricRecorder:
    """
    Observability sink（best-effort）

    - observe(name, seconds) : duration sample → histogram
    - set_gauge(name, value) : gauge update
    - record(name, value)    : plain key/value, logged

    Every call is fire-and-forget: a failing sink logs a warning and never
    raises into the caller.
    """

    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)
    registry: CollectorRegistry = field(default_factory=CollectorRegistry)

    content_type = CONTENT_TYPE_LATEST

    def __post_init__(self):
        # process / interpreter / gc default series, like a default registry
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)
        GCCollector(registry=self.registry)

        # name → (histogram, unit scale applied to seconds)
        self._histograms = {
            FETCH_BATCH: (
                Histogram(
                    "pipeline_fetch_blocks_seconds",
                    "Time to fetch and prepare blocks",
                    buckets=[0.5, 1, 2, 5, 10, 20],
                    registry=self.registry,
                ),
                1.0,
            ),
            FIT: (
                Histogram(
                    "pipeline_train_seconds",
                    "Model training time (seconds)",
                    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2],
                    registry=self.registry,
                ),
                1.0,
            ),
            PREDICT: (
                Histogram(
                    "pipeline_inference_ms",
                    "Inference latency (ms)",
                    buckets=[0.1, 0.5, 1, 2, 5, 10, 20],
                    registry=self.registry,
                ),
                1000.0,
            ),
        }
        self._gauges = {
            LAST_TRAIN_MSE: Gauge(
                "pipeline_last_train_loss",
                "Last training loss (MSE)",
                registry=self.registry,
            ),
            LAST_BASE_FEE: Gauge(
                "chain_last_base_fee_gwei",
                "Latest observed base fee (gwei)",
                registry=self.registry,
            ),
        }

    def record(self, name: str, value: Any):
        if not self.enabled:
            return
        self.metrics[name] = value
        logs.info(f"[Metric] {name} = {value}")

    def observe(self, name: str, seconds: float):
        if not self.enabled:
            return
        try:
            histogram, scale = self._histograms[name]
            histogram.observe(seconds * scale)
            self.metrics[name] = seconds
        except Exception as e:
            logs.warning(f"[Metric] observe {name} failed: {e!r}")

    def set_gauge(self, name: str, value: float):
        if not self.enabled:
            return
        try:
            self._gauges[name].set(value)
            self.metrics[name] = value
        except Exception as e:
            logs.warning(f"[Metric] gauge {name} failed: {e!r}")

    def export(self) -> bytes:
        """Prometheus text exposition of this recorder's registry."""
        return generate_latest(self.registry)
