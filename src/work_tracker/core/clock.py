# src/work_tracker/core/clock.py

from __future__ import annotations

import time
from datetime import date


class SystemClock:
    """Wall-clock time source (epoch milliseconds)."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


def today_iso() -> str:
    return date.today().isoformat()
