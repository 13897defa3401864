from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import tzinfo

from ...sessions.model import Session


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for hours and punctuality)."""

    @abstractmethod
    def overtime_hours(self, worked_hours: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def is_late(self, session: Session, tz: tzinfo) -> bool:
        raise NotImplementedError

    def split_hours(self, worked_hours: float) -> tuple[float, float]:
        """Return (regular, overtime)."""
        overtime = self.overtime_hours(worked_hours)
        return worked_hours - overtime, overtime
