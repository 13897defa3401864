"""In-memory stand-ins for the MySQL repositories."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from attendance_tracker.core.exceptions import StoreError
from attendance_tracker.holidays.model import Holiday
from attendance_tracker.leave.model import LeaveRecord
from attendance_tracker.sessions.model import Session, SessionClosure, SessionDraft, SessionPatch

UTC = timezone.utc


def at(y: int, m: int, d: int, hh: int = 0, mm: int = 0, ss: int = 0) -> datetime:
    return datetime(y, m, d, hh, mm, ss, tzinfo=UTC)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class InMemorySessionStore:
    def __init__(self):
        self.sessions: dict[str, Session] = {}
        self._id = 0
        self.writes = 0

    def add(self, session: Session) -> Session:
        self.sessions[session.session_id] = session
        return session

    def create_session(self, draft: SessionDraft) -> Session:
        self._id += 1
        self.writes += 1
        session = Session(
            session_id=f"s{self._id}",
            employee_id=draft.employee_id,
            employee_name=draft.employee_name,
            clock_in=draft.clock_in,
            location=draft.location,
            notes=draft.notes,
        )
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def close_session(self, session_id: str, closure: SessionClosure) -> Optional[Session]:
        current = self.sessions.get(session_id)
        if current is None or current.clock_out is not None:
            return None
        self.writes += 1
        closed = replace(
            current,
            clock_out=closure.clock_out,
            breaks=closure.breaks,
            total_hours=closure.total_hours,
            regular_hours=closure.regular_hours,
            overtime_hours=closure.overtime_hours,
            status=closure.status,
            location=closure.location,
            notes=closure.notes,
            edited_by=closure.edited_by,
            edit_reason=closure.edit_reason,
        )
        self.sessions[session_id] = closed
        return closed

    def patch_session(self, session_id: str, patch: SessionPatch, *, require_open: bool = False) -> Optional[Session]:
        current = self.sessions.get(session_id)
        if current is None or (require_open and current.clock_out is not None):
            return None
        self.writes += 1
        changes = {k: v for k, v in vars(patch).items() if v is not None}
        updated = replace(current, **changes)
        self.sessions[session_id] = updated
        return updated

    def find_open_sessions(self, employee_id: str) -> list[Session]:
        found = [s for s in self.sessions.values() if s.employee_id == employee_id and s.clock_out is None]
        return sorted(found, key=lambda s: (s.clock_in, s.session_id))

    def find_open_session(self, employee_id: str) -> Optional[Session]:
        found = self.find_open_sessions(employee_id)
        return found[0] if found else None

    def find_all_open_sessions(self) -> list[Session]:
        return sorted((s for s in self.sessions.values() if s.clock_out is None), key=lambda s: s.clock_in)

    def query_by_employee_and_range(self, employee_id: str, start: datetime, end: datetime) -> list[Session]:
        found = [s for s in self.sessions.values() if s.employee_id == employee_id and start <= s.clock_in < end]
        return sorted(found, key=lambda s: s.clock_in)


class FailingSessionStore(InMemorySessionStore):
    """Reads work; every write fails like an unreachable database."""

    def create_session(self, draft):
        raise StoreError("store unavailable")

    def close_session(self, session_id, closure):
        raise StoreError("store unavailable")

    def patch_session(self, session_id, patch, *, require_open=False):
        raise StoreError("store unavailable")


@dataclass
class InMemoryHolidays:
    holidays: list[Holiday] = field(default_factory=list)
    fail_writes: bool = False

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> list[Holiday]:
        return sorted(
            (h for h in self.holidays if (start is None or h.date >= start) and (end is None or h.date <= end)),
            key=lambda h: h.date,
        )

    def create(self, *, holiday_date: date, name: str, description: Optional[str] = None) -> Holiday:
        if self.fail_writes:
            raise StoreError("store unavailable")
        next_id = max((int(h.holiday_id) for h in self.holidays), default=0) + 1
        holiday = Holiday(holiday_id=next_id, date=holiday_date, name=name, description=description)
        self.holidays.append(holiday)
        return holiday

    def update(self, holiday_id: int, *, name: str, description: Optional[str] = None) -> Optional[Holiday]:
        if self.fail_writes:
            raise StoreError("store unavailable")
        for i, h in enumerate(self.holidays):
            if h.holiday_id == holiday_id:
                self.holidays[i] = replace(h, name=name, description=description)
                return self.holidays[i]
        return None

    def delete(self, holiday_id: int) -> bool:
        if self.fail_writes:
            raise StoreError("store unavailable")
        before = len(self.holidays)
        self.holidays = [h for h in self.holidays if h.holiday_id != holiday_id]
        return len(self.holidays) < before


@dataclass
class InMemoryLeaves:
    leaves: list[LeaveRecord] = field(default_factory=list)

    def list_for_employee(self, employee_id: str, start: date, end: date) -> list[LeaveRecord]:
        return [l for l in self.leaves if l.employee_id == employee_id and l.start_date <= end and l.end_date >= start]
