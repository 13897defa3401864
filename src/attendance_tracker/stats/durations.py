from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from ..sessions.model import Break


class DurationKind(str, Enum):
    OK = "ok"
    IN_PROGRESS = "in_progress"
    INVALID = "invalid"


@dataclass(frozen=True)
class WorkDuration:
    """Worked time for one session.

    ``hours`` keeps full precision for aggregation; ``display`` truncates to
    whole hours and minutes.
    """

    kind: DurationKind
    hours: float = 0.0

    @property
    def display(self) -> str:
        if self.kind is DurationKind.IN_PROGRESS:
            return "In progress"
        if self.kind is DurationKind.INVALID:
            return "Invalid"
        minutes = int(self.hours * 60)
        return f"{minutes // 60}h {minutes % 60}m"


IN_PROGRESS = WorkDuration(DurationKind.IN_PROGRESS)
INVALID = WorkDuration(DurationKind.INVALID)


def completed_break_seconds(breaks: Iterable[Break]) -> float:
    return sum(max((b.end_time - b.start_time).total_seconds(), 0.0) for b in breaks if b.end_time is not None)


def calculate_duration(clock_in: datetime, clock_out: Optional[datetime] = None, breaks: Iterable[Break] = ()) -> WorkDuration:
    """Worked hours between clock-in and clock-out minus completed breaks.

    Corrupt historical records (clock-out before clock-in) degrade to the
    ``INVALID`` sentinel so report views stay renderable.
    """
    if clock_out is None:
        return IN_PROGRESS
    if clock_out < clock_in:
        return INVALID

    seconds = (clock_out - clock_in).total_seconds() - completed_break_seconds(breaks)
    return WorkDuration(DurationKind.OK, max(seconds, 0.0) / 3600)
