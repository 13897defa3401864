from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union


@dataclass(frozen=True)
class Holiday:
    """Non-working day in the local calendar, managed by administrators."""

    holiday_id: Union[int, str]  # str only for unsaved client-side placeholders
    date: date
    name: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.holiday_id,
            "date": self.date.strftime("%Y-%m-%d"),
            "name": self.name,
            "description": self.description,
        }
