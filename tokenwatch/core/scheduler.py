"""
Periodic Task Scheduler

Runs an async tick function on a fixed cadence until stopped. The sleep
function is injectable so tests can drive ticks without waiting.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class PeriodicTask:
    """
    Ticker + task function.

    A tick that raises is logged and the loop carries on with the next
    tick; only cancellation or stop() ends the loop.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        func: Callable[[], Awaitable[object]],
        sleep: SleepFn = asyncio.sleep,
        run_immediately: bool = True,
    ):
        """
        Args:
            name: Label used in log messages
            interval: Seconds between ticks
            func: Coroutine function called once per tick
            sleep: Sleep coroutine (asyncio.sleep in production)
            run_immediately: If False, wait one interval before the first tick
        """
        self.name = name
        self.interval = interval
        self.func = func
        self.run_immediately = run_immediately
        self._sleep = sleep
        self._running = False
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._running

    def stop(self):
        """Stop after the current tick or sleep."""
        self._running = False

    async def tick(self):
        """Run the task function once, logging any failure."""
        self.ticks += 1
        try:
            await self.func()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.exception(f"[{self.name}] tick {self.ticks} failed: {e}")

    async def run(self, max_ticks: Optional[int] = None):
        """
        Tick until stopped, cancelled, or max_ticks is reached.

        Args:
            max_ticks: Optional tick limit (mainly for tests)
        """
        self._running = True
        logger.info(f"[{self.name}] started (every {self.interval:g}s)")

        try:
            if not self.run_immediately:
                await self._sleep(self.interval)

            while self._running:
                await self.tick()
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
                if not self._running:
                    break
                await self._sleep(self.interval)
        except asyncio.CancelledError:
            logger.info(f"[{self.name}] cancelled")
            raise
        finally:
            self._running = False

        logger.info(f"[{self.name}] stopped after {self.ticks} ticks")
