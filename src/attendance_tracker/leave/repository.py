from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import LeaveRecord


class LeaveRepository(Protocol):
    def list_for_employee(self, employee_id: str, start: date, end: date) -> Sequence[LeaveRecord]:
        """Leave requests overlapping the inclusive range."""

        raise NotImplementedError
