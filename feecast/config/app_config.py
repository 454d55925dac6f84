#!filepath: feecast/config/app_config.py
import os
from typing import Any, Dict

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from .api_config import ApiConfig
from .fetch_config import FetchConfig
from .log_config import LogConfig
from .model_config import ModelConfig
from .rpc_config import RpcConfig


def project_root() -> str:
    """
    返回项目根目录（基于当前文件位置推导）:
    feecast/config/app_config.py → feecast/config → feecast → project_root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


# env var → (section, field)
ENV_OVERRIDES: Dict[str, tuple] = {
    "RPC_URL": ("rpc", "url"),
    "PORT": ("api", "port"),
    "BLOCK_WINDOW": ("fetch", "block_window"),
    "BLOCK_STEP": ("fetch", "block_step"),
    "FETCH_MAX_CONCURRENCY": ("fetch", "max_concurrency"),
    "FETCH_RETRIES": ("fetch", "max_retries"),
    "FETCH_BACKOFF_MS": ("fetch", "backoff_ms"),
    "DEFAULT_PRIORITY_GWEI": ("model", "default_priority_gwei"),
}


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    rpc: RpcConfig = Field(default_factory=RpcConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用 feecast/config/base.yml
        - 默认配置路径不依赖当前工作目录；.env 先在当前工作目录查找
        - 环境变量覆盖 YAML（RPC_URL, BLOCK_WINDOW, ...）
        """
        root = project_root()

        # 1) 先加载 .env：当前工作目录优先（已安装的 console script），其次项目根目录
        #    load_dotenv 不覆盖已存在的变量，先加载者生效
        cwd_env = find_dotenv(usecwd=True)
        if cwd_env:
            load_dotenv(cwd_env)
        load_dotenv(os.path.join(root, ".env"))

        # 2) 决定配置文件路径
        if path is None:
            path = os.path.join(os.path.dirname(__file__), "base.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # 4) 从 env 注入覆盖项
        cls._apply_env_overrides(raw)
        return cls(**raw)

    @staticmethod
    def _apply_env_overrides(raw: Dict[str, Any]) -> None:
        for env_name, (section, field) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None or value == "":
                continue
            block = raw.get(section) or {}
            block[field] = value
            raw[section] = block
