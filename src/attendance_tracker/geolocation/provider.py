from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from ..core.exceptions import GeolocationTimeout, InvalidCoordinates, PermissionDenied, PositionUnavailable
from .model import PositionFix

# Browser GeolocationPositionError codes.
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


class PositionProvider(Protocol):
    def current_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionFix:
        """Return a fix or raise PermissionDenied / PositionUnavailable / GeolocationTimeout."""

        raise NotImplementedError


def _parse_captured_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Browser Position.timestamp is epoch milliseconds.
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise InvalidCoordinates("location timestamp is missing or malformed")


class SubmittedPositionProvider(PositionProvider):
    """Fix (or browser error) submitted by the client with a clock request."""

    def __init__(self, payload: Mapping[str, Any]):
        self._payload = payload

    def current_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionFix:
        error = self._payload.get("error")
        if error:
            code = error.get("code") if isinstance(error, Mapping) else error
            message = error.get("message", "") if isinstance(error, Mapping) else ""
            if code == PERMISSION_DENIED:
                raise PermissionDenied(message or "Geolocation permission denied")
            if code == TIMEOUT:
                raise GeolocationTimeout(message or "Geolocation request timed out")
            raise PositionUnavailable(message or "Position information unavailable")

        lat = self._payload.get("latitude", self._payload.get("lat"))
        lng = self._payload.get("longitude", self._payload.get("lng"))
        return PositionFix(
            latitude=lat,
            longitude=lng,
            accuracy=self._payload.get("accuracy"),
            captured_at=_parse_captured_at(self._payload.get("timestamp")),
        )
