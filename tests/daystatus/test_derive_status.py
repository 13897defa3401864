from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from attendance_tracker.core.constants import DUPLICATE_CLEANUP_REASON
from attendance_tracker.core.enums import DayStatusKind, RequestStatus, SessionStatus
from attendance_tracker.daystatus import build_calendar_month, derive_status, group_leaves_by_day
from attendance_tracker.daystatus.service import CalendarService
from attendance_tracker.holidays.model import Holiday
from attendance_tracker.leave.model import LeaveRecord
from attendance_tracker.sessions.model import Session
from attendance_tracker.sessions.service import ClockService

from fakes import UTC, FixedClock, InMemoryHolidays, InMemoryLeaves, InMemorySessionStore, at

TODAY = date(2024, 1, 20)
MONDAY = date(2024, 1, 15)
SUNDAY = date(2024, 1, 14)


def _session(sid: str, day: date, start_h: int = 9, end_h: int = 17, **kw) -> Session:
    return Session(
        session_id=sid,
        employee_id="e1",
        employee_name="Alice",
        clock_in=at(day.year, day.month, day.day, start_h),
        clock_out=at(day.year, day.month, day.day, end_h),
        status=SessionStatus.COMPLETED,
        **kw,
    )


def _leave(status: RequestStatus, day: date = MONDAY, half_day: bool = False) -> LeaveRecord:
    return LeaveRecord(request_id=1, employee_id="e1", start_date=day, end_date=day, status=status, half_day=half_day)


def test_worked_sunday_still_renders_as_holiday():
    result = derive_status(SUNDAY, set(), {SUNDAY: [_session("s1", SUNDAY)]}, TODAY)

    assert result.status is DayStatusKind.HOLIDAY
    assert result.holiday_name == "Sunday"


def test_named_holiday_beats_a_session():
    result = derive_status(MONDAY, {MONDAY: "Founders Day"}, {MONDAY: [_session("s1", MONDAY)]}, TODAY)

    assert result.status is DayStatusKind.HOLIDAY
    assert result.holiday_name == "Founders Day"


def test_future_day_is_upcoming():
    future = date(2024, 1, 22)
    assert derive_status(future, {future}, {}, TODAY).status is DayStatusKind.UPCOMING


def test_leave_mapping_and_precedence_over_present():
    sessions = {MONDAY: [_session("s1", MONDAY)]}

    cases = [
        (_leave(RequestStatus.APPROVED), DayStatusKind.APPROVED_LEAVE),
        (_leave(RequestStatus.APPROVED, half_day=True), DayStatusKind.HALF_DAY),
        (_leave(RequestStatus.PENDING), DayStatusKind.UNAPPROVED_LEAVE),
        (_leave(RequestStatus.REJECTED), DayStatusKind.UNAPPROVED_LEAVE),
    ]
    for leave, expected in cases:
        assert derive_status(MONDAY, set(), sessions, TODAY, {MONDAY: leave}).status is expected


def test_approved_leave_wins_over_pending_on_same_day():
    leaves = [_leave(RequestStatus.PENDING), _leave(RequestStatus.APPROVED)]
    by_day = group_leaves_by_day(leaves, MONDAY, MONDAY)
    assert by_day[MONDAY].status is RequestStatus.APPROVED


def test_present_and_absent():
    present = derive_status(MONDAY, set(), {MONDAY: [_session("s1", MONDAY)]}, TODAY)
    absent = derive_status(date(2024, 1, 16), set(), {}, TODAY)

    assert present.status is DayStatusKind.PRESENT
    assert present.hours == 8.0
    assert present.duration.display == "8h 0m"
    assert absent.status is DayStatusKind.ABSENT


def test_calendar_month_has_one_entry_per_day():
    days = build_calendar_month(
        2024,
        1,
        sessions=[_session("s1", MONDAY), _session("dup", date(2024, 1, 16), edit_reason=DUPLICATE_CLEANUP_REASON)],
        holidays={date(2024, 1, 1): "New Year"},
        today=TODAY,
        tz=UTC,
    )

    assert len(days) == 31
    by_date = {d.date: d for d in days}
    assert by_date[date(2024, 1, 1)].status is DayStatusKind.HOLIDAY
    assert by_date[MONDAY].status is DayStatusKind.PRESENT
    # duplicate-cleanup records do not count as attendance
    assert by_date[date(2024, 1, 16)].status is DayStatusKind.ABSENT
    assert by_date[date(2024, 1, 31)].status is DayStatusKind.UPCOMING


def test_calendar_service_buckets_by_local_day():
    tz = ZoneInfo("Asia/Ho_Chi_Minh")
    store = InMemorySessionStore()
    # 20:00 UTC on the 15th is 03:00 on the 16th in UTC+7
    store.add(Session(session_id="s1", employee_id="e1", employee_name="", clock_in=at(2024, 1, 15, 20),
                      clock_out=at(2024, 1, 16, 4)))
    clock = ClockService(store, tz=tz)
    holidays = InMemoryHolidays([Holiday(holiday_id=1, date=date(2024, 1, 1), name="New Year")])
    calendar = CalendarService(clock, holidays, InMemoryLeaves(), now=FixedClock(at(2024, 1, 20, 12)))

    days = {d.date: d for d in calendar.get_calendar_month("e1", 2024, 1)}

    assert days[date(2024, 1, 15)].status is DayStatusKind.ABSENT
    assert days[date(2024, 1, 16)].status is DayStatusKind.PRESENT
    assert days[date(2024, 1, 1)].holiday_name == "New Year"
    assert days[date(2024, 1, 16)].to_dict()["status"] == "present"
