"""Day-status derivation.

Every surface that renders a day status (calendar, statistics, reports) goes
through ``derive_status`` so the precedence lives in one place:

    upcoming (future) > holiday/Sunday > leave > present > absent

A session on a Sunday still renders as ``holiday``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Collection, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import is_sunday, iter_days, local_day, month_bounds
from ..core.constants import DUPLICATE_CLEANUP_REASON
from ..core.enums import DayStatusKind, RequestStatus
from ..leave.model import LeaveRecord
from ..sessions.model import Session
from ..stats.durations import DurationKind, WorkDuration, calculate_duration

SUNDAY_LABEL = "Sunday"


@dataclass(frozen=True)
class DayStatus:
    date: date
    status: DayStatusKind
    session: Optional[Session] = None
    duration: Optional[WorkDuration] = None
    holiday_name: Optional[str] = None
    leave: Optional[LeaveRecord] = None

    @property
    def hours(self) -> Optional[float]:
        if self.duration is None or self.duration.kind is not DurationKind.OK:
            return None
        return self.duration.hours

    def to_dict(self) -> dict:
        s = self.session
        return {
            "date": self.date.strftime("%Y-%m-%d"),
            "status": self.status.value,
            "session_id": s.session_id if s else None,
            "clock_in": s.clock_in.isoformat() if s else None,
            "clock_out": s.clock_out.isoformat() if s and s.clock_out else None,
            "hours": self.hours,
            "duration": self.duration.display if self.duration else None,
            "holiday_name": self.holiday_name,
        }


def is_working_day(day: date, holidays: Collection[date]) -> bool:
    return not is_sunday(day) and day not in holidays


def group_sessions_by_day(sessions: Iterable[Session], tz: tzinfo) -> dict[date, list[Session]]:
    """Bucket sessions by the employee's local calendar day, oldest first.

    Sessions closed by duplicate cleanup never existed as far as a day is concerned.
    """
    out: dict[date, list[Session]] = {}
    for s in sorted(sessions, key=lambda x: x.clock_in):
        if s.edit_reason == DUPLICATE_CLEANUP_REASON:
            continue
        out.setdefault(local_day(s.clock_in, tz), []).append(s)
    return out


def group_leaves_by_day(leaves: Iterable[LeaveRecord], start: date, end: date) -> dict[date, LeaveRecord]:
    """Map each covered day to its most relevant leave (approved wins)."""
    out: dict[date, LeaveRecord] = {}
    for leave in leaves:
        day = max(leave.start_date, start)
        last = min(leave.end_date, end)
        while day <= last:
            current = out.get(day)
            if current is None or (leave.status is RequestStatus.APPROVED and current.status is not RequestStatus.APPROVED):
                out[day] = leave
            day = date.fromordinal(day.toordinal() + 1)
    return out


def _day_duration(sessions: Sequence[Session]) -> WorkDuration:
    durations = [calculate_duration(s.clock_in, s.clock_out, s.breaks) for s in sessions]
    for d in durations:
        if d.kind is not DurationKind.OK:
            return d
    return WorkDuration(DurationKind.OK, sum(d.hours for d in durations))


def _leave_status(leave: LeaveRecord) -> DayStatusKind:
    if leave.status is RequestStatus.APPROVED:
        return DayStatusKind.HALF_DAY if leave.half_day else DayStatusKind.APPROVED_LEAVE
    return DayStatusKind.UNAPPROVED_LEAVE


def derive_status(
    day: date,
    holidays: Collection[date],
    sessions_by_day: Mapping[date, Sequence[Session]],
    today: date,
    leaves_by_day: Optional[Mapping[date, LeaveRecord]] = None,
) -> DayStatus:
    """Classify one calendar day.

    ``holidays`` may be a plain set of dates or a mapping of date -> name.
    """
    if day > today:
        return DayStatus(date=day, status=DayStatusKind.UPCOMING)

    if day in holidays:
        name = holidays.get(day) if isinstance(holidays, Mapping) else None
        return DayStatus(date=day, status=DayStatusKind.HOLIDAY, holiday_name=name)

    if is_sunday(day):
        return DayStatus(date=day, status=DayStatusKind.HOLIDAY, holiday_name=SUNDAY_LABEL)

    sessions = sessions_by_day.get(day) or ()
    duration = _day_duration(sessions) if sessions else None
    session = sessions[0] if sessions else None

    leave = (leaves_by_day or {}).get(day)
    if leave is not None:
        return DayStatus(date=day, status=_leave_status(leave), session=session, duration=duration, leave=leave)

    if session is not None:
        return DayStatus(date=day, status=DayStatusKind.PRESENT, session=session, duration=duration)

    return DayStatus(date=day, status=DayStatusKind.ABSENT)


def build_calendar(
    start: date,
    end: date,
    *,
    sessions: Iterable[Session],
    holidays: Collection[date],
    today: date,
    tz: tzinfo,
    leaves: Iterable[LeaveRecord] = (),
) -> list[DayStatus]:
    """One DayStatus per day in ``[start, end]``."""
    sessions_by_day = group_sessions_by_day(sessions, tz)
    leaves_by_day = group_leaves_by_day(leaves, start, end)
    return [derive_status(day, holidays, sessions_by_day, today, leaves_by_day) for day in iter_days(start, end)]


def build_calendar_month(
    year: int,
    month: int,
    *,
    sessions: Iterable[Session],
    holidays: Collection[date],
    today: date,
    tz: tzinfo,
    leaves: Iterable[LeaveRecord] = (),
) -> list[DayStatus]:
    start, end = month_bounds(year, month)
    return build_calendar(start, end, sessions=sessions, holidays=holidays, today=today, tz=tz, leaves=leaves)
