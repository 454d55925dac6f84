#!filepath: feecast/utils/retry.py
import asyncio
import random
from functools import wraps
from typing import Callable, Optional, Tuple, Type

from feecast import logs


class AsyncRetry:
    """
    异步 async 重试工具（用于 httpx JSON-RPC 等上游调用）

    - exceptions : 参与重试判断的异常类型
    - retry_if   : 可注入的分类器；返回 False 的异常立即抛出，不重试
    - max_delay  : 退避上限（秒）
    """

    @staticmethod
    async def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        retry_if: Optional[Callable[[BaseException], bool]] = None,
        max_attempts: int = 3,
        delay: float = 1.0,
        backoff: float = 2.0,
        max_delay: Optional[float] = None,
        jitter: bool = True,
        **kwargs,
    ):
        attempt = 1
        while attempt <= max_attempts:

            try:
                return await func(*args, **kwargs)

            except exceptions as e:
                if retry_if is not None and not retry_if(e):
                    raise

                if attempt == max_attempts:
                    logs.warning(
                        f"[AsyncRetry] {getattr(func, '__name__', func)} 达到最大重试次数 "
                        f"({max_attempts} attempts): {e}"
                    )
                    raise

                wait = AsyncRetry.backoff_delay(
                    attempt, delay=delay, backoff=backoff, max_delay=max_delay
                )
                if jitter:
                    wait = wait * random.uniform(0.8, 1.2)

                logs.warning(
                    f"[AsyncRetry] 第 {attempt}/{max_attempts - 1} 次失败: {e}. "
                    f"{wait:.2f}s 后重试..."
                )
                await asyncio.sleep(wait)

                attempt += 1

    @staticmethod
    def backoff_delay(
        attempt: int,
        *,
        delay: float,
        backoff: float,
        max_delay: Optional[float] = None,
    ) -> float:
        """Delay before retry number ``attempt`` (1-based)."""
        wait = delay * (backoff ** (attempt - 1))
        if max_delay is not None:
            wait = min(wait, max_delay)
        return wait

    @staticmethod
    def decorator(
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        retry_if: Optional[Callable[[BaseException], bool]] = None,
        max_attempts: int = 3,
        delay: float = 1.0,
        backoff: float = 2.0,
        max_delay: Optional[float] = None,
        jitter: bool = True,
    ):
        def wrapper(func: Callable):
            @wraps(func)
            async def inner(*args, **kwargs):
                return await AsyncRetry.run(
                    func,
                    *args,
                    exceptions=exceptions,
                    retry_if=retry_if,
                    max_attempts=max_attempts,
                    delay=delay,
                    backoff=backoff,
                    max_delay=max_delay,
                    jitter=jitter,
                    **kwargs,
                )

            return inner

        return wrapper
