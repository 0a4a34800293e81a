"""Local display countdown seeded from server timer snapshots."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    mins, secs = divmod(max(seconds, 0), 60)
    return f"{mins}:{secs:02d}"


class TimerSynchronizer:
    """Ticks the display between server snapshots.

    The display never goes below zero and reaching zero only freezes it: the
    debate is over when the server says so, not when this clock runs out.
    """

    def __init__(self) -> None:
        self.time_left = 0
        self.active = False
        self._zero_reported = True

    def seed(self, time_left: int, active: bool) -> None:
        self.time_left = max(int(time_left), 0)
        self.active = bool(active) and self.time_left > 0
        self._zero_reported = not self.active

    def freeze(self) -> None:
        self.time_left = 0
        self.active = False
        self._zero_reported = True

    def tick(self) -> bool:
        """Decrement by one second. Returns True on the tick that reaches zero."""
        if not self.active:
            return False
        self.time_left = max(self.time_left - 1, 0)
        if self.time_left > 0:
            return False
        self.active = False
        if self._zero_reported:
            return False
        self._zero_reported = True
        return True

    @property
    def display(self) -> str:
        return format_time(self.time_left)

    async def run(
        self,
        on_zero: Callable[[], None] | None = None,
        *,
        interval: float = 1.0,
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            if self.tick() and on_zero is not None:
                on_zero()
