from __future__ import annotations

import math
import time
import typing as t
from collections import deque

from loguru import logger

from resilient_notifier.notifierErrors import RateLimited

WINDOW_SECONDS = 60.0
BURST_WINDOW_SECONDS = 1.0
BURST_PENALTY_SECONDS = 1.1


class RateLimiter:
    """
    Dual sliding-window limiter (per second and per minute).

    When a cap is hit the limiter sleeps out the provider's window first and
    then raises RateLimited, so the caller's very next attempt should pass
    while the hit still shows up in metrics. Not thread-safe.
    """

    def __init__(
        self,
        per_second: int,
        per_minute: int,
        *,
        clock: t.Callable[[], float] = time.monotonic,
        sleep: t.Callable[[float], None] = time.sleep,
    ) -> None:
        if per_second < 1 or per_minute < 1:
            raise ValueError("Rate limits must be >= 1")
        self.per_second = per_second
        self.per_minute = per_minute
        self._clock = clock
        self._sleep = sleep
        self._window: deque[float] = deque()

    def __len__(self) -> int:
        return len(self._window)

    def check_and_record(self) -> None:
        now = self._clock()
        self._cleanup(now)

        recent = sum(1 for ts in self._window if now - ts < BURST_WINDOW_SECONDS)
        if recent >= self.per_second:
            logger.warning(f"Per-second rate limit reached ({self.per_second}/s), waiting {BURST_PENALTY_SECONDS}s")
            self._sleep(BURST_PENALTY_SECONDS)
            raise RateLimited(1)

        if len(self._window) >= self.per_minute:
            wait = WINDOW_SECONDS - (now - self._window[0])
            logger.warning(f"Per-minute rate limit reached ({self.per_minute}/min), waiting {wait:.1f}s")
            self._sleep(wait)
            raise RateLimited(max(1, math.ceil(wait)))

        self._window.append(now)

    def _cleanup(self, now: float) -> None:
        while self._window and now - self._window[0] >= WINDOW_SECONDS:
            self._window.popleft()
