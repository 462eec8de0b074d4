"""
Compute Budget

Tracks provider quota units (Alchemy compute units) consumed this month.
The counter resets at the start of each calendar month via daily_tick(),
which a background task calls once every 24 hours.

The tracker does not throttle anyone; callers read used/remaining and
decide for themselves.
"""

import logging
import threading
from datetime import date, datetime
from typing import Callable

import pytz

from ..config import config

logger = logging.getLogger(__name__)

# daily_tick() may observe the new month on day 2 (short months, drift)
MIN_DAYS_BETWEEN_RESETS = 28


def _utc_today() -> date:
    return datetime.now(pytz.utc).date()


class ComputeBudget:
    """
    Process-wide counter of consumed quota units.

    Each counter is guarded by its own lock for its single
    read-modify-write, so it can be shared between the event loop
    and worker threads.
    """

    def __init__(
        self,
        capacity: int = None,
        today: Callable[[], date] = _utc_today,
    ):
        """
        Initialize the budget.

        Args:
            capacity: Units available per period (default from config)
            today: Returns the current UTC date (injectable for tests)
        """
        self.capacity = capacity if capacity is not None else config.compute_unit_capacity
        self._today = today

        self._used = 0
        self._used_lock = threading.Lock()

        self._days_since_reset = 0
        self._days_lock = threading.Lock()

    @property
    def used(self) -> int:
        with self._used_lock:
            return self._used

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.used, 0)

    @property
    def is_exhausted(self) -> bool:
        return self.used >= self.capacity

    @property
    def days_since_reset(self) -> int:
        with self._days_lock:
            return self._days_since_reset

    def add_units(self, units: int):
        """Record units consumed by an upstream call."""
        if units < 0:
            raise ValueError(f"units must be non-negative, got {units}")
        with self._used_lock:
            self._used += units

    def daily_tick(self) -> bool:
        """
        Advance the reset counter by one day, resetting at a month boundary.

        Resets when the day-of-month is 1, or when it is 2 and at least
        28 ticks have elapsed since the last reset.

        Returns:
            True if the budget was reset
        """
        day = self._today().day

        with self._days_lock:
            if day == 1 or (day == 2 and self._days_since_reset >= MIN_DAYS_BETWEEN_RESETS):
                with self._used_lock:
                    previous = self._used
                    self._used = 0
                self._days_since_reset = 0
                logger.info(f"Compute budget reset (was {previous:,}/{self.capacity:,} units)")
                return True

            self._days_since_reset += 1

        logger.debug(f"Compute budget: {self.used:,}/{self.capacity:,} units, "
                     f"{self.days_since_reset} days since reset")
        return False

    async def tick(self):
        """PeriodicTask entry point."""
        self.daily_tick()
