#!filepath: feecast/config/rpc_config.py
from pydantic import BaseModel, Field


class RpcConfig(BaseModel):
    url: str = ""
    timeout: float = Field(default=10.0, gt=0)
