from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Coroutine
from functools import wraps

from tenacity import (
    AsyncRetrying,
    after_nothing,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .config import RetryConfig
from .types import BeforeSleepCallback, P, R, RetryCallback, SleepFunction


class RetryLogicError(RuntimeError): ...


class Retry:
    """Decorator retrying an async callable with a fixed delay.

    ``sleep`` replaces `asyncio.sleep` between attempts, so callers can
    observe or skip the waits.
    """

    def __init__(
        self,
        config: RetryConfig,
        after: RetryCallback | None = None,
        before_sleep: BeforeSleepCallback | None = None,
        sleep: SleepFunction | None = None,
    ) -> None:
        self._config = config
        self._after = after
        self._before_sleep = before_sleep
        self._sleep = sleep or asyncio.sleep
        self._stop = stop_after_attempt(config.max_attempts)
        self._wait = wait_fixed(config.delay_s)
        self._retry_condition = retry_if_exception_type(config.retry_on_exceptions or Exception)

    def __call__(
        self, func: Callable[P, Coroutine[object, object, R]]
    ) -> Callable[P, Coroutine[object, object, R]]:
        if not inspect.iscoroutinefunction(func):
            msg = f"retry() only wraps coroutine functions, got {func!r}"
            raise TypeError(msg)

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            async for attempt in AsyncRetrying(
                sleep=self._sleep,
                stop=self._stop,
                wait=self._wait,
                retry=self._retry_condition,
                after=self._after or after_nothing,
                before_sleep=self._before_sleep,
                reraise=True,
            ):
                with attempt:
                    return await func(*args, **kwargs)

            raise RetryLogicError("Async retry loop completed without success or failure")

        return wrapper


def retry(
    config: RetryConfig | None = None,
    after: RetryCallback | None = None,
    before_sleep: BeforeSleepCallback | None = None,
    sleep: SleepFunction | None = None,
) -> Retry:
    retry_config = config or RetryConfig()
    return Retry(retry_config, after, before_sleep, sleep)
