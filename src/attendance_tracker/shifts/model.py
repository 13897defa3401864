from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_OVERTIME_THRESHOLD_HOURS, DEFAULT_SHIFT_START


@dataclass(frozen=True)
class ShiftPolicy:
    """Shift rules used for punctuality and overtime."""

    shift_start: time = DEFAULT_SHIFT_START
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    overtime_threshold_hours: float = DEFAULT_OVERTIME_THRESHOLD_HOURS

    def latest_on_time(self, local_clock_in: datetime) -> datetime:
        start = datetime.combine(local_clock_in.date(), self.shift_start, tzinfo=local_clock_in.tzinfo)
        return start + timedelta(minutes=self.grace_minutes)
