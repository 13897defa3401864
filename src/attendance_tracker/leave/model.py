from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class LeaveRecord:
    """Leave request as seen by the attendance engine (read-only)."""

    request_id: int
    employee_id: str
    start_date: date
    end_date: date
    status: RequestStatus
    half_day: bool = False
    reason: Optional[str] = None
