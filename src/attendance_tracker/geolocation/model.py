from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..sessions.model import Coordinates


@dataclass(frozen=True)
class PositionFix:
    """Raw fix as reported by the positioning source (not yet validated)."""

    latitude: float
    longitude: float
    accuracy: Optional[float]
    captured_at: datetime


@dataclass(frozen=True)
class AccuracyWarning:
    accuracy_m: float
    threshold_m: float

    @property
    def message(self) -> str:
        return f"Location accuracy is low ({self.accuracy_m:.0f}m, expected under {self.threshold_m:.0f}m)"


@dataclass(frozen=True)
class GateResult:
    coordinates: Coordinates
    warning: Optional[AccuracyWarning] = None
