from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FitStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient-data"
    SINGULAR_SYSTEM = "singular-system"


@dataclass(frozen=True)
class FittedModel:
    """
    Linear model: y = bias + Σ weights[i] · x[i]

    Immutable; replaced wholesale by the next successful fit.
    """

    bias: float
    weights: Tuple[float, ...]
    train_mse: float

    @property
    def dimension(self) -> int:
        return len(self.weights)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bias": self.bias,
            "weights": list(self.weights),
            "mse": self.train_mse,
        }


@dataclass(frozen=True)
class TrainResult:
    """
    TrainResult（FINAL / FROZEN）

    语义：
    - 一次完整训练的纯内存态结果
    - model is set only when status is OK
    - 不包含任何 I/O 语义
    """

    status: FitStatus
    model: Optional[FittedModel] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is FitStatus.OK and self.model is not None


@dataclass(frozen=True)
class TrainSummary:
    """What a bootstrap / refresh caller gets back."""

    run_id: str
    samples: int
    status: FitStatus
    mse: Optional[float]
    published: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "samples": self.samples,
            "status": self.status.value,
            "mse": self.mse,
            "published": self.published,
        }
