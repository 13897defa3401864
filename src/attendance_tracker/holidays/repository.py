from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        raise NotImplementedError

    def create(self, *, holiday_date: date, name: str, description: Optional[str] = None) -> Holiday:
        raise NotImplementedError

    def update(self, holiday_id: int, *, name: str, description: Optional[str] = None) -> Optional[Holiday]:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
