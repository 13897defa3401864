from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import local_day, month_bounds, now_utc
from ..core.exceptions import ValidationError
from ..holidays.repository import HolidayRepository
from ..leave.repository import LeaveRepository
from ..sessions.service import ClockService
from .engine import DayStatus, build_calendar


class CalendarService:
    """Month view of day statuses for one employee, recomputed from the store."""

    def __init__(
        self,
        clock: ClockService,
        holidays: HolidayRepository,
        leaves: Optional[LeaveRepository] = None,
        *,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._clock = clock
        self._holidays = holidays
        self._leaves = leaves
        self._now = now or now_utc

    @property
    def tz(self) -> tzinfo:
        return self._clock.tz

    def today(self) -> date:
        return local_day(self._now(), self.tz)

    def get_range(self, employee_id: str, start: date, end: date, *, today: Optional[date] = None) -> Sequence[DayStatus]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        today = today or self.today()

        holidays = {h.date: h.name for h in self._holidays.list_holidays(start=start, end=end)}
        leaves = self._leaves.list_for_employee(employee_id, start, end) if self._leaves is not None else ()
        return build_calendar(
            start,
            end,
            sessions=self._clock.list_sessions(employee_id, start, end),
            holidays=holidays,
            today=today,
            tz=self.tz,
            leaves=leaves,
        )

    def get_calendar_month(self, employee_id: str, year: int, month: int, *, today: Optional[date] = None) -> Sequence[DayStatus]:
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}")
        start, end = month_bounds(year, month)
        return self.get_range(employee_id, start, end, today=today)
