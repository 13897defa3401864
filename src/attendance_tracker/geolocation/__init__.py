from .gate import GeolocationGate
from .geofence import Geofence, distance_meters
from .model import AccuracyWarning, GateResult, PositionFix
from .provider import PositionProvider, SubmittedPositionProvider

__all__ = [
    "AccuracyWarning",
    "GateResult",
    "GeolocationGate",
    "Geofence",
    "PositionFix",
    "PositionProvider",
    "SubmittedPositionProvider",
    "distance_meters",
]
