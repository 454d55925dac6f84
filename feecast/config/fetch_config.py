# feecast/config/fetch_config.py
from __future__ import annotations

from pydantic import BaseModel, field_validator


class FetchConfig(BaseModel):
    """
    FetchConfig（block window + fetch policy）

    Out-of-range values are clamped, not rejected:
    - block_window / block_step / max_concurrency >= 1
    - max_retries / backoff_ms >= 0
    """

    block_window: int = 200
    block_step: int = 1
    max_concurrency: int = 2
    max_retries: int = 5
    backoff_ms: int = 300
    max_backoff_ms: int = 5000

    @field_validator("block_window", "block_step", "max_concurrency")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        return max(1, v)

    @field_validator("max_retries", "backoff_ms", "max_backoff_ms")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        return max(0, v)

    @property
    def initial_backoff(self) -> float:
        return self.backoff_ms / 1000.0

    @property
    def max_backoff(self) -> float:
        return self.max_backoff_ms / 1000.0
