#!filepath: feecast/utils/logger.py
import os
import sys
from typing import Optional

from loguru import logger


class Logging:
    """
    生产级日志模块
    ---------------------------------------
    - stderr sink (always)
    - optional daily file sink with rotation / retention
    ---------------------------------------
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level

        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
        self._configure()

    def _configure(self) -> None:
        """
        配置全局 logger，每次调用都会替换已有 sinks
        """

        logger.remove()

        logger.add(
            sink=sys.stderr,
            level=self.level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
        )

        if self.log_dir:
            logger.add(
                sink=f"{self.log_dir}/{{time:YYYY-MM-DD}}.log",
                rotation=self.rotation,
                retention=self.retention,
                level=self.level,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
                enqueue=True,  # 多线程 / 多进程安全
                backtrace=True,
                diagnose=False,
            )

    # ----------- 日志方法 -----------
    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        logger.exception(msg, *args, **kwargs)


def init_logging(cfg) -> Logging:
    """
    Reconfigure the global ``logs`` sinks from a LogConfig.

    The module-level ``logs`` object keeps its identity so that every
    ``from feecast import logs`` sees the new sinks.
    """
    logs.log_dir = cfg.dir
    logs.rotation = cfg.rotation
    logs.retention = cfg.retention
    logs.level = cfg.level

    if logs.log_dir:
        os.makedirs(logs.log_dir, exist_ok=True)
    logs._configure()

    logs.info("\n-----------Logger initialized successfully.-----------")
    return logs


# 默认全局 logs（stderr only，可被 init_logging 替换）
logs = Logging()
