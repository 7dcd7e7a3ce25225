"""Jittered pre-fetch delay that keeps the worker under the source site's abuse thresholds."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

from disc_specs.core.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sleeps ``base + uniform(0, jitter)`` seconds per call.

    ``sleep`` and ``rng`` are injectable so tests can run without waiting.
    """

    def __init__(
        self,
        base_seconds: float | None = None,
        jitter_seconds: float | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.base_seconds = (
            settings.SCRAPE_DELAY_BASE_SECONDS if base_seconds is None else base_seconds
        )
        self.jitter_seconds = (
            settings.SCRAPE_DELAY_JITTER_SECONDS if jitter_seconds is None else jitter_seconds
        )
        self._sleep = sleep
        self._rng = rng or random.Random()

    def next_delay(self) -> float:
        return self.base_seconds + self._rng.uniform(0, self.jitter_seconds)

    async def wait(self) -> float:
        delay = self.next_delay()
        logger.info("Waiting %.1fs before fetching", delay)
        await self._sleep(delay)
        return delay
