from __future__ import annotations

from datetime import tzinfo
from typing import Optional

from ...sessions.model import Session
from ...shifts.model import ShiftPolicy
from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: overtime beyond the threshold, late after start + grace."""

    def __init__(self, policy: Optional[ShiftPolicy] = None):
        self.policy = policy or ShiftPolicy()

    def overtime_hours(self, worked_hours: float) -> float:
        return max(worked_hours - self.policy.overtime_threshold_hours, 0.0)

    def is_late(self, session: Session, tz: tzinfo) -> bool:
        local_in = session.clock_in.astimezone(tz)
        return local_in > self.policy.latest_on_time(local_in)
