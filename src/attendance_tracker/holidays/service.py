from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import optional_note, require_non_empty
from ..core.exceptions import HolidayNotFound, ValidationError
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        return self._holidays.list_holidays(start=start, end=end)

    def create(self, *, holiday_date: date, name: str, description: Optional[str] = None) -> Holiday:
        name = require_non_empty(name, "name")
        description = optional_note(description, "description")
        if any(h.date == holiday_date for h in self._holidays.list_holidays(start=holiday_date, end=holiday_date)):
            raise ValidationError(f"A holiday already exists on {holiday_date:%Y-%m-%d}")
        holiday = self._holidays.create(holiday_date=holiday_date, name=name, description=description)
        logger.info("Holiday %s created for %s", holiday.name, holiday.date)
        return holiday

    def update(self, holiday_id: int, *, name: str, description: Optional[str] = None) -> Holiday:
        name = require_non_empty(name, "name")
        holiday = self._holidays.update(int(holiday_id), name=name, description=optional_note(description, "description"))
        if holiday is None:
            raise HolidayNotFound(f"Holiday {holiday_id} not found")
        return holiday

    def delete(self, holiday_id: int) -> None:
        if not self._holidays.delete(int(holiday_id)):
            raise HolidayNotFound(f"Holiday {holiday_id} not found")
        logger.info("Holiday %s deleted", holiday_id)
