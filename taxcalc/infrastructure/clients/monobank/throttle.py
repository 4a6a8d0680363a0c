"""Rate-limit policies consulted between consecutive statement requests"""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from taxcalc.infrastructure.observability.metrics import throttle_wait_counter

logger = logging.getLogger(__name__)


class Throttle(Protocol):
    async def wait(self) -> None: ...


class FixedDelayThrottle:
    """Pause for a fixed delay; Monobank allows one statement call per minute"""

    def __init__(
        self,
        delay_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    async def wait(self) -> None:
        logger.info(
            "Waiting to respect Monobank API rate limit",
            extra={"delay_seconds": self.delay_seconds},
        )
        throttle_wait_counter.inc()
        await self._sleep(self.delay_seconds)


class NoThrottle:
    """No pause between requests; selected when the configured delay is zero"""

    async def wait(self) -> None:
        return None
