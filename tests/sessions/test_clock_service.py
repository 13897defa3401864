from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from attendance_tracker.core.constants import AUTO_CLOCK_OUT_NOTE
from attendance_tracker.core.enums import ClockState, SessionStatus
from attendance_tracker.core.exceptions import (
    BreakAlreadyOpen,
    ClockOutBeforeClockIn,
    DayAlreadyClosed,
    InvalidCoordinates,
    NoActiveSession,
    NoOpenBreak,
    SessionNotFound,
    ValidationError,
)
from attendance_tracker.sessions.service import ClockService

from fakes import UTC, FixedClock, InMemorySessionStore, at


def _service(now=None, tz=UTC):
    store = InMemorySessionStore()
    clock = FixedClock(now or at(2024, 1, 15, 9, 0))
    return store, clock, ClockService(store, tz=tz, clock=clock)


def test_full_day_with_lunch_break_is_eight_hours():
    store, clock, svc = _service()

    session = svc.clock_in("e1", "Alice", at(2024, 1, 15, 9, 0))
    svc.start_break(session.session_id, at(2024, 1, 15, 12, 0))
    svc.end_break(session.session_id, at(2024, 1, 15, 13, 0))
    closed = svc.clock_out(session.session_id, at(2024, 1, 15, 18, 0))

    assert closed.total_hours == pytest.approx(8.0)
    assert closed.regular_hours == pytest.approx(8.0)
    assert closed.overtime_hours == 0
    assert closed.status is SessionStatus.COMPLETED
    assert closed.breaks[0].duration == 3600


def test_half_hour_break_and_late_finish_is_eight_hours():
    store, clock, svc = _service()

    session = svc.clock_in("e1", "Alice", at(2024, 1, 15, 9, 0))
    svc.start_break(session.session_id, at(2024, 1, 15, 12, 0))
    svc.end_break(session.session_id, at(2024, 1, 15, 12, 30))
    closed = svc.clock_out(session.session_id, at(2024, 1, 15, 17, 30))

    assert closed.total_hours == pytest.approx(8.0)


def test_state_machine_walks_through_the_day():
    store, clock, svc = _service()
    assert svc.get_current_status("e1").state is ClockState.NOT_CLOCKED_IN

    session = svc.clock_in("e1", "Alice")
    status = svc.get_current_status("e1")
    assert status.state is ClockState.CLOCKED_IN
    assert status.current_record_id == session.session_id
    assert status.clock_in_time == at(2024, 1, 15, 9, 0)

    clock.advance(hours=3)
    svc.start_break(session.session_id)
    status = svc.get_current_status("e1")
    assert status.state is ClockState.ON_BREAK
    assert status.break_start_time == at(2024, 1, 15, 12, 0)

    clock.advance(minutes=30)
    svc.end_break(session.session_id)
    assert svc.get_current_status("e1").state is ClockState.CLOCKED_IN

    clock.advance(hours=5)
    svc.clock_out(session.session_id)
    assert svc.get_current_status("e1").state is ClockState.CLOCKED_OUT

    clock.advance(days=1)
    assert svc.get_current_status("e1").state is ClockState.NOT_CLOCKED_IN


def test_second_clock_in_is_a_no_op():
    store, clock, svc = _service()
    first = svc.clock_in("e1", "Alice")
    writes = store.writes

    assert svc.clock_in("e1", "Alice") is None
    assert store.writes == writes
    assert [s.session_id for s in store.find_open_sessions("e1")] == [first.session_id]


def test_clock_in_after_clock_out_same_day_is_rejected():
    store, clock, svc = _service()
    session = svc.clock_in("e1")
    svc.clock_out(session.session_id, at(2024, 1, 15, 17, 0))

    with pytest.raises(DayAlreadyClosed):
        svc.clock_in("e1", timestamp=at(2024, 1, 15, 18, 0))

    # next day is a fresh start
    assert svc.clock_in("e1", timestamp=at(2024, 1, 16, 9, 0)) is not None


def test_clock_out_must_be_after_clock_in():
    store, clock, svc = _service()
    session = svc.clock_in("e1")

    with pytest.raises(ClockOutBeforeClockIn):
        svc.clock_out(session.session_id, at(2024, 1, 15, 9, 0))
    with pytest.raises(ClockOutBeforeClockIn):
        svc.clock_out(session.session_id, at(2024, 1, 15, 8, 0))
    assert store.get_session(session.session_id).is_open


def test_clock_out_twice_raises_no_active_session():
    store, clock, svc = _service()
    session = svc.clock_in("e1")
    svc.clock_out(session.session_id, at(2024, 1, 15, 17, 0))

    with pytest.raises(NoActiveSession):
        svc.clock_out(session.session_id, at(2024, 1, 15, 18, 0))


def test_unknown_session_raises_not_found():
    store, clock, svc = _service()
    with pytest.raises(SessionNotFound):
        svc.clock_out("missing", at(2024, 1, 15, 17, 0))
    with pytest.raises(SessionNotFound):
        svc.start_break("missing")


def test_break_errors():
    store, clock, svc = _service()
    session = svc.clock_in("e1")

    with pytest.raises(NoOpenBreak):
        svc.end_break(session.session_id)

    svc.start_break(session.session_id, at(2024, 1, 15, 12, 0))
    with pytest.raises(BreakAlreadyOpen):
        svc.start_break(session.session_id, at(2024, 1, 15, 12, 5))


def test_clock_out_closes_a_dangling_break():
    store, clock, svc = _service()
    session = svc.clock_in("e1", timestamp=at(2024, 1, 15, 9, 0))
    svc.start_break(session.session_id, at(2024, 1, 15, 16, 0))

    closed = svc.clock_out(session.session_id, at(2024, 1, 15, 17, 0))

    assert closed.breaks[0].end_time == at(2024, 1, 15, 17, 0)
    assert closed.total_hours == pytest.approx(7.0)


def test_overtime_beyond_eight_hours():
    store, clock, svc = _service()
    session = svc.clock_in("e1", timestamp=at(2024, 1, 15, 9, 0))

    closed = svc.clock_out(session.session_id, at(2024, 1, 15, 19, 0))

    assert closed.total_hours == pytest.approx(10.0)
    assert closed.regular_hours == pytest.approx(8.0)
    assert closed.overtime_hours == pytest.approx(2.0)


def test_invalid_location_is_rejected_before_any_write():
    store, clock, svc = _service()

    with pytest.raises(InvalidCoordinates):
        svc.clock_in("e1", location={"latitude": 200, "longitude": 0})
    with pytest.raises(InvalidCoordinates):
        svc.clock_in("e1", location={"latitude": float("nan"), "longitude": 0})
    assert store.writes == 0


def test_location_and_notes_are_kept_per_side():
    store, clock, svc = _service()
    session = svc.clock_in("e1", location={"lat": 10.5, "lng": 106.7, "accuracy": 12}, notes="  early  ")
    closed = svc.clock_out(session.session_id, at(2024, 1, 15, 17, 0),
                           location={"latitude": 10.6, "longitude": 106.8}, notes="done")

    assert closed.location.clock_in.latitude == 10.5
    assert closed.location.clock_out.longitude == 106.8
    assert closed.notes.clock_in == "early"
    assert closed.notes.clock_out == "done"


def test_notes_longer_than_limit_are_rejected():
    store, clock, svc = _service()
    with pytest.raises(ValidationError):
        svc.clock_in("e1", notes="x" * 501)


def test_day_is_bucketed_in_employee_timezone():
    tz = ZoneInfo("Asia/Ho_Chi_Minh")  # UTC+7
    store, clock, svc = _service(now=at(2024, 1, 15, 20, 0), tz=tz)
    session = svc.clock_in("e1")  # 03:00 on the 16th locally
    svc.clock_out(session.session_id, at(2024, 1, 15, 21, 0))

    clock.now = at(2024, 1, 15, 23, 0)
    assert svc.get_current_status("e1").state is ClockState.CLOCKED_OUT

    # 16:59 UTC on the 16th is still 23:59 on the 16th locally
    clock.now = at(2024, 1, 16, 16, 59)
    assert svc.get_current_status("e1").state is ClockState.CLOCKED_OUT
    clock.now = at(2024, 1, 16, 17, 0)
    assert svc.get_current_status("e1").state is ClockState.NOT_CLOCKED_IN


def test_auto_clock_out_closes_sessions_from_previous_days():
    store, clock, svc = _service()
    stale = svc.clock_in("e1", timestamp=at(2024, 1, 15, 9, 0))
    fresh = svc.clock_in("e2", timestamp=at(2024, 1, 16, 8, 0))

    closed = svc.auto_clock_out(now=at(2024, 1, 16, 9, 0))

    assert [s.session_id for s in closed] == [stale.session_id]
    result = store.get_session(stale.session_id)
    assert result.clock_out == at(2024, 1, 15, 23, 59)
    assert result.status is SessionStatus.INCOMPLETE
    assert result.notes.clock_out == AUTO_CLOCK_OUT_NOTE
    assert store.get_session(fresh.session_id).is_open


def test_edit_session_recomputes_hours_and_marks_edited():
    store, clock, svc = _service()
    session = svc.clock_in("e1", timestamp=at(2024, 1, 15, 9, 0))
    svc.clock_out(session.session_id, at(2024, 1, 15, 12, 0))

    edited = svc.edit_session(
        session.session_id,
        edited_by="admin",
        edit_reason="forgot to clock out",
        clock_out=at(2024, 1, 15, 17, 0),
    )

    assert edited.total_hours == pytest.approx(8.0)
    assert edited.status is SessionStatus.EDITED
    assert edited.edited_by == "admin"

    with pytest.raises(ValidationError):
        svc.edit_session(session.session_id, edited_by="admin", edit_reason="")


def test_edit_closing_an_open_session_ends_its_open_break():
    store, clock, svc = _service()
    session = svc.clock_in("e1", timestamp=at(2024, 1, 15, 9, 0))
    svc.start_break(session.session_id, at(2024, 1, 15, 12, 0))

    edited = svc.edit_session(
        session.session_id,
        edited_by="admin",
        edit_reason="left during lunch",
        clock_out=at(2024, 1, 15, 17, 0),
    )

    assert edited.open_break is None
    assert edited.breaks[0].end_time == at(2024, 1, 15, 17, 0)
    assert edited.total_hours == pytest.approx(3.0)


def test_never_more_than_one_open_session():
    store, clock, svc = _service()
    steps = ["in", "in", "out", "in", "next", "in", "in", "out", "next", "in"]

    for step in steps:
        if step == "in":
            try:
                svc.clock_in("e1")
            except DayAlreadyClosed:
                pass
        elif step == "out":
            clock.advance(hours=8)
            status = svc.get_current_status("e1")
            svc.clock_out(status.current_record_id)
        else:
            clock.advance(days=1)
        assert len(store.find_open_sessions("e1")) <= 1
