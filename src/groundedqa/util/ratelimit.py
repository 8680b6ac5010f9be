import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeAlias

import structlog

_logger = structlog.get_logger()

SleepFunc: TypeAlias = Callable[[float], Awaitable[None]]


class FixedDelayRateLimiter:
    """Spaces out calls to a rate-limited service by a fixed delay.

    Callers ``await wait()`` after each request. The limiter never runs work
    of its own, so calls guarded by it stay strictly sequential and keep
    their order.
    """

    def __init__(self, delay_seconds: float, sleep: SleepFunc | None = None) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._delay = delay_seconds
        self._sleep: SleepFunc = sleep or asyncio.sleep

    @property
    def delay_seconds(self) -> float:
        return self._delay

    async def wait(self) -> None:
        if self._delay <= 0:
            return
        _logger.debug("rate_limit_wait", delay_seconds=self._delay)
        await self._sleep(self._delay)
