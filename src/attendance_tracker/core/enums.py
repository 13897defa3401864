from __future__ import annotations

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle status stored on each attendance session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EDITED = "edited"


class ClockState(str, Enum):
    """Per-employee clock state for the current local day."""

    NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"
    CLOCKED_OUT = "CLOCKED_OUT"


class DayStatusKind(str, Enum):
    """Single classification rendered for one calendar day."""

    PRESENT = "present"
    ABSENT = "absent"
    APPROVED_LEAVE = "approved-leave"
    UNAPPROVED_LEAVE = "unapproved-leave"
    HALF_DAY = "half-day"
    HOLIDAY = "holiday"
    UPCOMING = "upcoming"


class RequestStatus(str, Enum):
    """Approval state of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
