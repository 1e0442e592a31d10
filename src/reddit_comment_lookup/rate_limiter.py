import asyncio
import time
from typing import Awaitable, Callable, Optional


class RequestPacer:
    """
    Enforce a minimum interval between the starts of two outbound requests.

    One pacer holds one "time of last request" clock; every fetcher sharing the
    pacer shares the clock. Clock and sleep are injectable so pacing can be
    tested without real timers.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = float(min_interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request_time: Optional[float] = None

    @property
    def last_request_time(self) -> Optional[float]:
        return self._last_request_time

    async def await_turn(self) -> float:
        """Wait until a request may start; returns the seconds spent waiting."""
        async with self._lock:
            waited = 0.0
            if self._last_request_time is not None:
                elapsed = self._clock() - self._last_request_time
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    await self._sleep(waited)
            # Only reached when the wait completed; a cancelled waiter leaves the clock as it was.
            self._last_request_time = self._clock()
            return waited

    def reset(self) -> None:
        self._last_request_time = None
