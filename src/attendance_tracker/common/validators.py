from __future__ import annotations

import math
from typing import Any, Optional

from ..core.constants import MAX_NOTE_LENGTH
from ..core.exceptions import InvalidCoordinates, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_note(value: Optional[str], field_name: str = "notes") -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    value = value.strip()
    if not value:
        return None
    if len(value) > MAX_NOTE_LENGTH:
        raise ValidationError(f"{field_name} must be {MAX_NOTE_LENGTH} characters or less")
    return value


def _finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def check_coordinates(latitude: Any, longitude: Any, accuracy: Any = None) -> None:
    if not _finite_number(latitude) or not _finite_number(longitude):
        raise InvalidCoordinates("latitude and longitude must be finite numbers")
    if not -90 <= latitude <= 90:
        raise InvalidCoordinates(f"latitude out of range: {latitude}")
    if not -180 <= longitude <= 180:
        raise InvalidCoordinates(f"longitude out of range: {longitude}")
    if accuracy is not None and (not _finite_number(accuracy) or accuracy < 0):
        raise InvalidCoordinates(f"accuracy must be a non-negative number: {accuracy}")
