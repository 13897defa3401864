from __future__ import annotations

from datetime import timedelta

import pytest

from attendance_tracker.sessions.model import Break
from attendance_tracker.stats.durations import INVALID, IN_PROGRESS, DurationKind, calculate_duration

from fakes import at


def test_in_progress_without_clock_out():
    d = calculate_duration(at(2024, 1, 15, 9))
    assert d is IN_PROGRESS
    assert d.display == "In progress"


def test_clock_out_before_clock_in_is_invalid_not_an_error():
    d = calculate_duration(at(2024, 1, 15, 10), at(2024, 1, 15, 9))
    assert d is INVALID
    assert d.display == "Invalid"


def test_breaks_are_subtracted_and_display_truncates():
    lunch = Break("b1", at(2024, 1, 15, 12)).closed_at(at(2024, 1, 15, 12, 45))
    d = calculate_duration(at(2024, 1, 15, 9), at(2024, 1, 15, 17, 30, 59), [lunch])

    assert d.kind is DurationKind.OK
    assert d.hours == pytest.approx(7.75 + 59 / 3600)
    assert d.display == "7h 45m"


def test_open_breaks_are_ignored():
    open_break = Break("b1", at(2024, 1, 15, 12))
    d = calculate_duration(at(2024, 1, 15, 9), at(2024, 1, 15, 17), [open_break])
    assert d.hours == pytest.approx(8.0)


def test_duration_is_monotonic_in_clock_out():
    clock_in = at(2024, 1, 15, 9)
    lunch = Break("b1", at(2024, 1, 15, 12)).closed_at(at(2024, 1, 15, 13))
    previous = -1.0
    for minutes in range(0, 12 * 60, 7):
        hours = calculate_duration(clock_in, clock_in + timedelta(minutes=minutes), [lunch]).hours
        assert hours >= previous
        previous = hours
