"""Simulation clock: simulated time in integer milliseconds, advanced by the game loop."""
from __future__ import annotations

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000


def hours_to_ms(hours: float) -> int:
    return round(hours * MS_PER_HOUR)


def minutes_to_ms(minutes: float) -> int:
    return round(minutes * MS_PER_MINUTE)


def ms_to_hours(ms: int | float) -> float:
    return ms / MS_PER_HOUR


def get_day(now_ms: int) -> int:
    """Day number (1-based)."""
    return (now_ms // MS_PER_DAY) + 1


def format_time(now_ms: int) -> str:
    """Human-readable time string, e.g. 'Day 2 (08:30)'."""
    day = get_day(now_ms)
    hour = (now_ms % MS_PER_DAY) // MS_PER_HOUR
    minute = (now_ms % MS_PER_HOUR) // MS_PER_MINUTE
    return f"Day {day} ({hour:02d}:{minute:02d})"


class SimClock:
    """Monotonic simulated clock shared by the market engine and route analyzer."""

    def __init__(self, start_ms: int = 0) -> None:
        # Fractional milliseconds accumulate here; readers see whole ms.
        self._now = float(start_ms)

    def now(self) -> int:
        return int(self._now)

    def advance(self, delta_ms: int | float) -> int:
        """Move the clock forward. Negative deltas are ignored."""
        if delta_ms > 0:
            self._now += delta_ms
        return self.now()

    def set(self, now_ms: int | float) -> None:
        """Jump to an absolute time (used when restoring saved state)."""
        self._now = float(now_ms)

    def __call__(self) -> int:
        return self.now()
