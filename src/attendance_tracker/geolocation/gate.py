from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import check_coordinates
from ..core.constants import (
    DEFAULT_GEO_ACCURACY_THRESHOLD_M,
    DEFAULT_GEO_TIMEOUT_SECONDS,
    GEO_FRESHNESS_TOLERANCE_SECONDS,
)
from ..core.exceptions import InsecureContext, OutsideGeofence, PositionUnavailable
from ..sessions.model import Coordinates
from .geofence import Geofence
from .model import AccuracyWarning, GateResult
from .provider import PositionProvider

logger = logging.getLogger(__name__)


class GeolocationGate:
    """Acquire and validate a fresh position before a clock action.

    Never retries: the caller decides whether to ask again.
    """

    def __init__(
        self,
        provider: Optional[PositionProvider] = None,
        *,
        timeout_seconds: float = DEFAULT_GEO_TIMEOUT_SECONDS,
        accuracy_threshold_m: float = DEFAULT_GEO_ACCURACY_THRESHOLD_M,
        geofence: Optional[Geofence] = None,
        freshness_tolerance_seconds: float = GEO_FRESHNESS_TOLERANCE_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._provider = provider
        self.timeout_seconds = float(timeout_seconds)
        self.accuracy_threshold_m = float(accuracy_threshold_m)
        self.geofence = geofence
        self._tolerance = timedelta(seconds=freshness_tolerance_seconds)
        self._clock = clock or now_utc

    def acquire(self, secure_context: bool, *, provider: Optional[PositionProvider] = None) -> GateResult:
        """Return validated coordinates, or raise a GeolocationError/InvalidCoordinates.

        ``provider`` overrides the configured source for a single request.
        """
        if not secure_context:
            raise InsecureContext("Geolocation requires a secure (HTTPS) context")
        provider = provider or self._provider
        if provider is None:
            raise PositionUnavailable("No position source is available")

        requested_at = self._clock()
        fix = provider.current_position(high_accuracy=True, timeout=self.timeout_seconds, maximum_age=0)

        # maximum_age=0: anything captured before this request is a replay.
        if fix.captured_at < requested_at - self._tolerance:
            raise PositionUnavailable("Position fix is stale; a fresh fix is required")

        check_coordinates(fix.latitude, fix.longitude, fix.accuracy)
        coords = Coordinates(latitude=float(fix.latitude), longitude=float(fix.longitude),
                             accuracy=float(fix.accuracy) if fix.accuracy is not None else None)

        if self.geofence is not None and not self.geofence.contains(coords):
            distance = self.geofence.distance_to(coords)
            raise OutsideGeofence(
                f"Out of geofence (distance: {distance:.0f}m, allowed: {self.geofence.radius_m:.0f}m)"
            )

        warning = None
        if coords.accuracy is not None and coords.accuracy > self.accuracy_threshold_m:
            warning = AccuracyWarning(accuracy_m=coords.accuracy, threshold_m=self.accuracy_threshold_m)
            logger.info("Accepting low-accuracy fix: %.0fm", coords.accuracy)
        return GateResult(coordinates=coords, warning=warning)
