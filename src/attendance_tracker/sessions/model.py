from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.validators import check_coordinates
from ..core.enums import ClockState, SessionStatus


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def __post_init__(self) -> None:
        check_coordinates(self.latitude, self.longitude, self.accuracy)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinates":
        """Accept ``latitude/longitude`` or the short ``lat/lng`` keys."""
        lat = data.get("latitude", data.get("lat"))
        lng = data.get("longitude", data.get("lng"))
        return cls(latitude=lat, longitude=lng, accuracy=data.get("accuracy"))

    def to_dict(self) -> dict:
        out: dict = {"latitude": self.latitude, "longitude": self.longitude}
        if self.accuracy is not None:
            out["accuracy"] = self.accuracy
        return out


@dataclass(frozen=True)
class Break:
    break_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: float = 0.0  # seconds

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def closed_at(self, end_time: datetime) -> "Break":
        seconds = max((end_time - self.start_time).total_seconds(), 0.0)
        return replace(self, end_time=end_time, duration=seconds)


@dataclass(frozen=True)
class SessionLocation:
    clock_in: Optional[Coordinates] = None
    clock_out: Optional[Coordinates] = None


@dataclass(frozen=True)
class SessionNotes:
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """One clock-in to clock-out work period."""

    session_id: str
    employee_id: str
    employee_name: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    breaks: tuple[Break, ...] = ()
    location: SessionLocation = field(default_factory=SessionLocation)
    notes: SessionNotes = field(default_factory=SessionNotes)
    total_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    status: SessionStatus = SessionStatus.ACTIVE
    edited_by: Optional[str] = None
    edit_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @property
    def open_break(self) -> Optional[Break]:
        return next((b for b in self.breaks if b.is_open), None)


@dataclass(frozen=True)
class SessionDraft:
    """Values for a session that has not been persisted yet."""

    employee_id: str
    employee_name: str
    clock_in: datetime
    location: SessionLocation = field(default_factory=SessionLocation)
    notes: SessionNotes = field(default_factory=SessionNotes)


@dataclass(frozen=True)
class SessionClosure:
    """Fields written when a session is closed."""

    clock_out: datetime
    breaks: tuple[Break, ...]
    total_hours: float
    regular_hours: float
    overtime_hours: float
    status: SessionStatus
    location: SessionLocation = field(default_factory=SessionLocation)
    notes: SessionNotes = field(default_factory=SessionNotes)
    edited_by: Optional[str] = None
    edit_reason: Optional[str] = None


@dataclass(frozen=True)
class SessionPatch:
    """Partial update; None fields are left untouched."""

    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    breaks: Optional[tuple[Break, ...]] = None
    total_hours: Optional[float] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    status: Optional[SessionStatus] = None
    edited_by: Optional[str] = None
    edit_reason: Optional[str] = None


@dataclass(frozen=True)
class CurrentStatus:
    """Read model of where an employee stands today.

    Always reconstructable from the store; clients cache it as a hint only.
    """

    state: ClockState
    current_record_id: Optional[str] = None
    clock_in_time: Optional[datetime] = None
    break_start_time: Optional[datetime] = None

    @classmethod
    def not_clocked_in(cls) -> "CurrentStatus":
        return cls(state=ClockState.NOT_CLOCKED_IN)

    @classmethod
    def from_session(cls, session: Session) -> "CurrentStatus":
        if not session.is_open:
            return cls(state=ClockState.CLOCKED_OUT, current_record_id=session.session_id, clock_in_time=session.clock_in)
        open_break = session.open_break
        return cls(
            state=ClockState.ON_BREAK if open_break else ClockState.CLOCKED_IN,
            current_record_id=session.session_id,
            clock_in_time=session.clock_in,
            break_start_time=open_break.start_time if open_break else None,
        )

    @property
    def has_open_session(self) -> bool:
        return self.state in (ClockState.CLOCKED_IN, ClockState.ON_BREAK)

    def to_dict(self) -> dict:
        return {
            "status": self.state.value,
            "current_record_id": self.current_record_id,
            "clock_in_time": self.clock_in_time.isoformat() if self.clock_in_time else None,
            "break_start_time": self.break_start_time.isoformat() if self.break_start_time else None,
        }


def session_to_dict(s: Session) -> dict:
    def _ts(value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    return {
        "id": s.session_id,
        "employee_id": s.employee_id,
        "employee_name": s.employee_name,
        "clock_in": _ts(s.clock_in),
        "clock_out": _ts(s.clock_out),
        "breaks": [
            {
                "id": b.break_id,
                "start_time": _ts(b.start_time),
                "end_time": _ts(b.end_time),
                "duration": b.duration,
            }
            for b in s.breaks
        ],
        "location": {
            "clock_in": s.location.clock_in.to_dict() if s.location.clock_in else None,
            "clock_out": s.location.clock_out.to_dict() if s.location.clock_out else None,
        },
        "notes": {"clock_in": s.notes.clock_in, "clock_out": s.notes.clock_out},
        "total_hours": s.total_hours,
        "regular_hours": s.regular_hours,
        "overtime_hours": s.overtime_hours,
        "status": s.status.value,
        "edited_by": s.edited_by,
        "edit_reason": s.edit_reason,
    }
