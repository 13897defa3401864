from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Callable, Mapping, Optional, Sequence, Union
from uuid import uuid4

from ..common.datetime_utils import ensure_aware, local_day, local_start_of_day, now_utc
from ..common.validators import optional_note, require_non_empty
from ..core.constants import AUTO_CLOCK_OUT_NOTE, DEFAULT_AUTO_CLOCK_OUT_TIME, DUPLICATE_CLEANUP_REASON
from ..core.enums import SessionStatus
from ..core.exceptions import (
    BreakAlreadyOpen,
    ClockOutBeforeClockIn,
    DayAlreadyClosed,
    NoActiveSession,
    NoOpenBreak,
    SessionNotFound,
    ValidationError,
)
from ..stats.calculator.base import HoursCalculator
from ..stats.calculator.standard_calculator import StandardHoursCalculator
from ..stats.durations import calculate_duration
from .model import (
    Break,
    Coordinates,
    CurrentStatus,
    Session,
    SessionClosure,
    SessionDraft,
    SessionLocation,
    SessionNotes,
    SessionPatch,
)
from .repository import SessionStore

logger = logging.getLogger(__name__)

LocationInput = Union[Coordinates, Mapping[str, Any], None]


def _coerce_location(location: LocationInput) -> Optional[Coordinates]:
    if location is None or isinstance(location, Coordinates):
        return location
    return Coordinates.from_dict(location)


class ClockService:
    """Per-employee clock session state machine.

    NOT_CLOCKED_IN -> CLOCKED_IN <-> ON_BREAK -> CLOCKED_OUT, reset each local day.
    Every decision reads the store; nothing is trusted from cached client state.
    """

    def __init__(
        self,
        sessions: SessionStore,
        *,
        tz: tzinfo,
        calculator: Optional[HoursCalculator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._sessions = sessions
        self._tz = tz
        self._calculator = calculator or StandardHoursCalculator()
        self._clock = clock or now_utc

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def _now(self) -> datetime:
        return self._clock()

    def _require_session(self, session_id: str) -> Session:
        session = self._sessions.get_session(session_id)
        if session is None:
            raise SessionNotFound(f"Attendance record {session_id} not found")
        return session

    def _require_open(self, session_id: str) -> Session:
        session = self._require_session(session_id)
        if not session.is_open:
            raise NoActiveSession(f"Attendance record {session_id} is already clocked out")
        return session

    def _day_range(self, start: date, end: date) -> tuple[datetime, datetime]:
        return local_start_of_day(start, self._tz), local_start_of_day(end + timedelta(days=1), self._tz)

    def _closed_session_on(self, employee_id: str, day: date) -> Optional[Session]:
        start, end = self._day_range(day, day)
        closed = [
            s
            for s in self._sessions.query_by_employee_and_range(employee_id, start, end)
            if not s.is_open and s.edit_reason != DUPLICATE_CLEANUP_REASON
        ]
        return closed[-1] if closed else None

    def _closure(
        self,
        session: Session,
        clock_out: datetime,
        *,
        status: SessionStatus,
        location: Optional[Coordinates] = None,
        note: Optional[str] = None,
    ) -> SessionClosure:
        # A dangling break ends when the session ends.
        breaks = tuple(b.closed_at(clock_out) if b.is_open else b for b in session.breaks)
        hours = calculate_duration(session.clock_in, clock_out, breaks).hours
        regular, overtime = self._calculator.split_hours(hours)
        return SessionClosure(
            clock_out=clock_out,
            breaks=breaks,
            total_hours=hours,
            regular_hours=regular,
            overtime_hours=overtime,
            status=status,
            location=SessionLocation(clock_in=session.location.clock_in, clock_out=location),
            notes=SessionNotes(clock_in=session.notes.clock_in, clock_out=note),
        )

    def get_current_status(self, employee_id: str, *, now: Optional[datetime] = None) -> CurrentStatus:
        open_session = self._sessions.find_open_session(employee_id)
        if open_session is not None:
            return CurrentStatus.from_session(open_session)

        today = local_day(now or self._now(), self._tz)
        closed = self._closed_session_on(employee_id, today)
        if closed is not None:
            return CurrentStatus.from_session(closed)
        return CurrentStatus.not_clocked_in()

    def clock_in(
        self,
        employee_id: str,
        employee_name: str = "",
        timestamp: Optional[datetime] = None,
        location: LocationInput = None,
        notes: Optional[str] = None,
    ) -> Optional[Session]:
        """Open a session.

        Returns None, without writing anything, when the employee already has an
        open session. Callers treat that as a no-op and resynchronize.
        """
        employee_id = require_non_empty(employee_id, "employee_id")
        ts = ensure_aware(timestamp or self._now())
        coords = _coerce_location(location)
        note = optional_note(notes)

        existing = self._sessions.find_open_session(employee_id)
        if existing is not None:
            logger.info("Clock-in ignored: employee %s already has open session %s", employee_id, existing.session_id)
            return None

        if self._closed_session_on(employee_id, local_day(ts, self._tz)) is not None:
            raise DayAlreadyClosed("Employee has already clocked out today")

        session = self._sessions.create_session(
            SessionDraft(
                employee_id=employee_id,
                employee_name=(employee_name or "").strip(),
                clock_in=ts,
                location=SessionLocation(clock_in=coords),
                notes=SessionNotes(clock_in=note),
            )
        )
        logger.info("Employee %s clocked in (session %s)", employee_id, session.session_id)
        return session

    def start_break(self, session_id: str, timestamp: Optional[datetime] = None) -> Session:
        session = self._require_open(session_id)
        if session.open_break is not None:
            raise BreakAlreadyOpen("Employee is already on break")

        ts = ensure_aware(timestamp or self._now())
        if ts < session.clock_in:
            raise ValidationError("Break cannot start before clock-in")

        new_break = Break(break_id=f"break_{uuid4().hex[:12]}", start_time=ts)
        updated = self._sessions.patch_session(
            session_id, SessionPatch(breaks=session.breaks + (new_break,)), require_open=True
        )
        if updated is None:
            raise NoActiveSession(f"Attendance record {session_id} is already clocked out")
        return updated

    def end_break(self, session_id: str, timestamp: Optional[datetime] = None) -> Session:
        session = self._require_open(session_id)
        open_break = session.open_break
        if open_break is None:
            raise NoOpenBreak("No active break found")

        ts = ensure_aware(timestamp or self._now())
        if ts < open_break.start_time:
            raise ValidationError("Break cannot end before it started")

        breaks = tuple(b.closed_at(ts) if b is open_break else b for b in session.breaks)
        updated = self._sessions.patch_session(session_id, SessionPatch(breaks=breaks), require_open=True)
        if updated is None:
            raise NoActiveSession(f"Attendance record {session_id} is already clocked out")
        return updated

    def clock_out(
        self,
        session_id: str,
        timestamp: Optional[datetime] = None,
        location: LocationInput = None,
        notes: Optional[str] = None,
    ) -> Session:
        session = self._require_open(session_id)
        ts = ensure_aware(timestamp or self._now())
        if ts <= session.clock_in:
            raise ClockOutBeforeClockIn("Clock out time must be after clock in time")
        coords = _coerce_location(location)
        note = optional_note(notes)

        closure = self._closure(session, ts, status=SessionStatus.COMPLETED, location=coords, note=note)
        closed = self._sessions.close_session(session_id, closure)
        if closed is None:
            raise NoActiveSession(f"Attendance record {session_id} is already clocked out")
        logger.info("Employee %s clocked out (session %s, %.2fh)", closed.employee_id, session_id, closed.total_hours)
        return closed

    def edit_session(
        self,
        session_id: str,
        *,
        edited_by: str,
        edit_reason: str,
        clock_in: Optional[datetime] = None,
        clock_out: Optional[datetime] = None,
        breaks: Optional[Sequence[Break]] = None,
    ) -> Session:
        """Administrative correction; marks the record as edited."""
        edited_by = require_non_empty(edited_by, "edited_by")
        edit_reason = require_non_empty(edit_reason, "edit_reason")
        session = self._require_session(session_id)

        new_in = ensure_aware(clock_in) if clock_in else session.clock_in
        new_out = ensure_aware(clock_out) if clock_out else session.clock_out
        new_breaks = tuple(breaks) if breaks is not None else session.breaks
        if new_out is not None and new_out <= new_in:
            raise ClockOutBeforeClockIn("Clock out time must be after clock in time")
        if new_out is not None:
            new_breaks = tuple(b.closed_at(new_out) if b.is_open else b for b in new_breaks)

        if new_out is None:
            patch = SessionPatch(clock_in=new_in, breaks=new_breaks, status=SessionStatus.EDITED,
                                 edited_by=edited_by, edit_reason=edit_reason)
        else:
            hours = calculate_duration(new_in, new_out, new_breaks).hours
            regular, overtime = self._calculator.split_hours(hours)
            patch = SessionPatch(
                clock_in=new_in,
                clock_out=new_out,
                breaks=new_breaks,
                total_hours=hours,
                regular_hours=regular,
                overtime_hours=overtime,
                status=SessionStatus.EDITED,
                edited_by=edited_by,
                edit_reason=edit_reason,
            )

        updated = self._sessions.patch_session(session_id, patch)
        if updated is None:
            raise SessionNotFound(f"Attendance record {session_id} not found")
        logger.info("Session %s edited by %s: %s", session_id, edited_by, edit_reason)
        return updated

    def auto_clock_out(self, *, now: Optional[datetime] = None, cutoff: time = DEFAULT_AUTO_CLOCK_OUT_TIME) -> list[Session]:
        """Close sessions left open past their day's cutoff as incomplete."""
        now = ensure_aware(now or self._now())
        closed: list[Session] = []
        for session in self._sessions.find_all_open_sessions():
            day = local_day(session.clock_in, self._tz)
            cutoff_at = datetime.combine(day, cutoff, tzinfo=self._tz)
            if now < cutoff_at:
                continue
            clock_out = max(cutoff_at, session.clock_in)
            closure = self._closure(session, clock_out, status=SessionStatus.INCOMPLETE, note=AUTO_CLOCK_OUT_NOTE)
            result = self._sessions.close_session(session.session_id, closure)
            if result is not None:
                logger.warning("Auto clock-out of session %s for employee %s", session.session_id, session.employee_id)
                closed.append(result)
        return closed

    def list_sessions(self, employee_id: str, start: date, end: date) -> Sequence[Session]:
        """Sessions clocked in between two local calendar days, inclusive."""
        if end < start:
            raise ValidationError("End date must be on or after start date")
        range_start, range_end = self._day_range(start, end)
        return self._sessions.query_by_employee_and_range(employee_id, range_start, range_end)
