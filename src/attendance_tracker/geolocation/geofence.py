from __future__ import annotations

import math
from dataclasses import dataclass

from ..sessions.model import Coordinates

EARTH_RADIUS_M = 6371000


def distance_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance using the Haversine formula."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    delta_lat = math.radians(b.latitude - a.latitude)
    delta_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(delta_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass(frozen=True)
class Geofence:
    center: Coordinates
    radius_m: float

    def distance_to(self, point: Coordinates) -> float:
        return distance_meters(self.center, point)

    def contains(self, point: Coordinates) -> bool:
        return self.distance_to(point) <= self.radius_m
