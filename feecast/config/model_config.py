#!filepath: feecast/config/model_config.py
from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    default_priority_gwei: float = Field(default=2.0, ge=0)
    max_fee_multiplier: float = 1.125
    retrain_interval_sec: float = 0.0  # 0 → bootstrap only
