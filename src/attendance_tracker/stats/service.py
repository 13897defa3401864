from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import iter_days, local_day, now_utc
from ..core.constants import DUPLICATE_CLEANUP_REASON
from ..core.enums import DayStatusKind
from ..core.exceptions import ValidationError
from ..daystatus.engine import derive_status, group_leaves_by_day, group_sessions_by_day, is_working_day
from ..holidays.repository import HolidayRepository
from ..leave.repository import LeaveRepository
from ..sessions.service import ClockService
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .durations import DurationKind, calculate_duration

_LEAVE_KINDS = {DayStatusKind.APPROVED_LEAVE, DayStatusKind.UNAPPROVED_LEAVE, DayStatusKind.HALF_DAY}


@dataclass(frozen=True)
class AttendanceStats:
    total_hours: float = 0.0
    average_hours: float = 0.0
    attendance_rate: int = 0
    punctuality_rate: int = 0
    overtime_hours: float = 0.0
    working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    late_days: int = 0

    def to_dict(self) -> dict:
        return {
            "total_hours": round(self.total_hours, 2),
            "average_hours": round(self.average_hours, 2),
            "attendance_rate": self.attendance_rate,
            "punctuality_rate": self.punctuality_rate,
            "overtime_hours": round(self.overtime_hours, 2),
            "working_days": self.working_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "leave_days": self.leave_days,
            "late_days": self.late_days,
        }


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage; 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return math.floor(part / whole * 100 + 0.5)


class StatsService:
    def __init__(
        self,
        clock: ClockService,
        holidays: HolidayRepository,
        leaves: Optional[LeaveRepository] = None,
        *,
        calculator: Optional[HoursCalculator] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._clock = clock
        self._holidays = holidays
        self._leaves = leaves
        self._calculator = calculator or StandardHoursCalculator()
        self._now = now or now_utc

    def calculate_stats(self, employee_id: str, start: date, end: date, *, today: Optional[date] = None) -> AttendanceStats:
        """Hours, overtime, attendance and punctuality over ``[start, min(end, today)]``."""
        if end < start:
            raise ValidationError("End date must be on or after start date")
        tz = self._clock.tz
        today = today or local_day(self._now(), tz)
        last = min(end, today)
        if last < start:
            return AttendanceStats()

        sessions = [
            s for s in self._clock.list_sessions(employee_id, start, last)
            if s.edit_reason != DUPLICATE_CLEANUP_REASON
        ]
        sessions_by_day = group_sessions_by_day(sessions, tz)
        holidays = {h.date for h in self._holidays.list_holidays(start=start, end=last)}
        leaves_by_day = None
        if self._leaves is not None:
            leaves_by_day = group_leaves_by_day(self._leaves.list_for_employee(employee_id, start, last), start, last)

        working = present = absent = leave = 0
        for day in iter_days(start, last):
            if not is_working_day(day, holidays):
                continue
            working += 1
            status = derive_status(day, holidays, sessions_by_day, today, leaves_by_day).status
            if status is DayStatusKind.PRESENT:
                present += 1
            elif status in _LEAVE_KINDS:
                leave += 1
            elif status is DayStatusKind.ABSENT:
                absent += 1

        total_hours = 0.0
        overtime_hours = 0.0
        hours_by_day: dict[date, float] = {}
        for s in sessions:
            duration = calculate_duration(s.clock_in, s.clock_out, s.breaks)
            if duration.kind is not DurationKind.OK:
                continue
            day = local_day(s.clock_in, tz)
            hours_by_day[day] = hours_by_day.get(day, 0.0) + duration.hours
            total_hours += duration.hours
            overtime_hours += self._calculator.overtime_hours(duration.hours)

        # Punctuality is judged per session on working days.
        evaluated = late = 0
        late_days: set[date] = set()
        for day, day_sessions in sessions_by_day.items():
            if not is_working_day(day, holidays):
                continue
            for s in day_sessions:
                evaluated += 1
                if self._calculator.is_late(s, tz):
                    late += 1
                    late_days.add(day)

        return AttendanceStats(
            total_hours=total_hours,
            average_hours=total_hours / len(hours_by_day) if hours_by_day else 0.0,
            attendance_rate=percentage(present, working),
            punctuality_rate=percentage(evaluated - late, evaluated),
            overtime_hours=overtime_hours,
            working_days=working,
            present_days=present,
            absent_days=absent,
            leave_days=leave,
            late_days=len(late_days),
        )
