from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of message and membership timestamps (UTC)."""

    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        # Millisecond precision, matching the timestamps browsers produce.
        now = datetime.now(timezone.utc)
        return now.replace(microsecond=now.microsecond // 1000 * 1000)
