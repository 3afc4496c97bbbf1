"""Timer package."""

from .engine import TimerEngine, TICK_INTERVAL_MS
from .models import (
    TimerMode,
    SchedulingMode,
    TimerSnapshot,
    Todo,
    MAX_ESTIMATE_SECONDS,
    format_hms,
)

__all__ = [
    "TimerEngine",
    "TICK_INTERVAL_MS",
    "TimerMode",
    "SchedulingMode",
    "TimerSnapshot",
    "Todo",
    "MAX_ESTIMATE_SECONDS",
    "format_hms",
]
