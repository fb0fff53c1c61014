"""Tests for src/star_trader/mechanics/sim_clock.py."""
from __future__ import annotations

import pytest

from star_trader.mechanics.sim_clock import (
    MS_PER_HOUR,
    SimClock,
    format_time,
    get_day,
    hours_to_ms,
    minutes_to_ms,
    ms_to_hours,
)


class TestConversions:
    def test_hours(self):
        assert hours_to_ms(1.5) == 5_400_000

    def test_minutes(self):
        assert minutes_to_ms(30) == 1_800_000

    def test_back_to_hours(self):
        assert ms_to_hours(MS_PER_HOUR * 3) == 3.0


class TestFormatTime:
    @pytest.mark.parametrize("now, expected", [
        (0, "Day 1 (00:00)"),
        (hours_to_ms(8.5), "Day 1 (08:30)"),
        (hours_to_ms(26), "Day 2 (02:00)"),
    ])
    def test_format(self, now, expected):
        assert format_time(now) == expected

    def test_day(self):
        assert get_day(hours_to_ms(49)) == 3


class TestSimClock:
    def test_starts_at_zero(self):
        assert SimClock().now() == 0

    def test_advance(self):
        clock = SimClock(start_ms=100)
        assert clock.advance(50) == 150
        assert clock() == 150

    def test_negative_delta_ignored(self):
        clock = SimClock(start_ms=100)
        clock.advance(-50)
        assert clock.now() == 100

    def test_set(self):
        clock = SimClock()
        clock.set(7_200_000)
        assert clock.now() == 7_200_000

    def test_fractional_frames_accumulate(self):
        clock = SimClock()
        for _ in range(216_000):
            clock.advance(1000 / 60)
        assert abs(clock.now() - MS_PER_HOUR) <= 1

    def test_sub_millisecond_ticks_add_up(self):
        clock = SimClock()
        for _ in range(1_000):
            clock.advance(0.5)
        assert clock.now() == 500
        assert isinstance(clock(), int)
