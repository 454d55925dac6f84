#!filepath: feecast/__init__.py

from .utils.logger import Logging, logs, init_logging
from .utils.retry import AsyncRetry
from .config.app_config import AppConfig

# alias 简化调用
async_retry = AsyncRetry

__all__ = [
    "logs", "Logging", "init_logging",
    "async_retry",
    "AppConfig",
]
