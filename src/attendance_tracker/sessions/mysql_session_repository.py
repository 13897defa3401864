from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence
from uuid import uuid4

from ..common.datetime_utils import now_utc
from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, from_db_datetime, load_json, to_db_datetime
from .model import (
    Break,
    Coordinates,
    Session,
    SessionClosure,
    SessionDraft,
    SessionLocation,
    SessionNotes,
    SessionPatch,
)
from .repository import SessionStore

_COLUMNS = """
    session_id, employee_id, employee_name, clock_in, clock_out, breaks, location, notes,
    total_hours, regular_hours, overtime_hours, status, edited_by, edit_reason, created_at, updated_at
"""


def _breaks_to_json(breaks: Sequence[Break]) -> Optional[str]:
    return dump_json(
        [
            {
                "id": b.break_id,
                "start_time": to_db_datetime(b.start_time).isoformat(),
                "end_time": to_db_datetime(b.end_time).isoformat() if b.end_time else None,
                "duration": b.duration,
            }
            for b in breaks
        ]
    )


def _breaks_from_json(value: Any) -> tuple[Break, ...]:
    return tuple(
        Break(
            break_id=str(item["id"]),
            start_time=from_db_datetime(item["start_time"]),
            end_time=from_db_datetime(item.get("end_time")),
            duration=float(item.get("duration") or 0),
        )
        for item in load_json(value, default=[])
    )


def _location_to_json(location: SessionLocation) -> Optional[str]:
    return dump_json(
        {
            "clock_in": location.clock_in.to_dict() if location.clock_in else None,
            "clock_out": location.clock_out.to_dict() if location.clock_out else None,
        }
    )


def _location_from_json(value: Any) -> SessionLocation:
    data = load_json(value, default={}) or {}
    clock_in = data.get("clock_in")
    clock_out = data.get("clock_out")
    return SessionLocation(
        clock_in=Coordinates.from_dict(clock_in) if clock_in else None,
        clock_out=Coordinates.from_dict(clock_out) if clock_out else None,
    )


def _notes_to_json(notes: SessionNotes) -> Optional[str]:
    return dump_json({"clock_in": notes.clock_in, "clock_out": notes.clock_out})


def _notes_from_json(value: Any) -> SessionNotes:
    data = load_json(value, default={}) or {}
    return SessionNotes(clock_in=data.get("clock_in"), clock_out=data.get("clock_out"))


def _row_to_session(r: dict) -> Session:
    return Session(
        session_id=str(r["session_id"]),
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        clock_in=from_db_datetime(r["clock_in"]),
        clock_out=from_db_datetime(r.get("clock_out")),
        breaks=_breaks_from_json(r.get("breaks")),
        location=_location_from_json(r.get("location")),
        notes=_notes_from_json(r.get("notes")),
        total_hours=float(r.get("total_hours") or 0),
        regular_hours=float(r.get("regular_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        status=SessionStatus(r["status"]),
        edited_by=r.get("edited_by"),
        edit_reason=r.get("edit_reason"),
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


class MySQLSessionStore(SessionStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, session_id: str) -> Optional[Session]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (session_id,))
        r = fetchone(cur)
        return _row_to_session(r) if r else None

    def create_session(self, draft: SessionDraft) -> Session:
        session_id = uuid4().hex
        now = to_db_datetime(now_utc())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    session_id, employee_id, employee_name, clock_in, breaks, location, notes,
                    status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session_id,
                    draft.employee_id,
                    draft.employee_name,
                    to_db_datetime(draft.clock_in),
                    _breaks_to_json(()),
                    _location_to_json(draft.location),
                    _notes_to_json(draft.notes),
                    SessionStatus.ACTIVE.value,
                    now,
                    now,
                ),
            )
            return self._select_one(cur, session_id)

    def get_session(self, session_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, session_id)

    def close_session(self, session_id: str, closure: SessionClosure) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET clock_out=%s, breaks=%s, total_hours=%s, regular_hours=%s, overtime_hours=%s,
                    status=%s, location=%s, notes=%s, edited_by=%s, edit_reason=%s, updated_at=%s
                WHERE session_id=%s AND clock_out IS NULL
                """,
                (
                    to_db_datetime(closure.clock_out),
                    _breaks_to_json(closure.breaks),
                    closure.total_hours,
                    closure.regular_hours,
                    closure.overtime_hours,
                    closure.status.value,
                    _location_to_json(closure.location),
                    _notes_to_json(closure.notes),
                    closure.edited_by,
                    closure.edit_reason,
                    to_db_datetime(now_utc()),
                    session_id,
                ),
            )
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, session_id)

    def patch_session(self, session_id: str, patch: SessionPatch, *, require_open: bool = False) -> Optional[Session]:
        sets: list[str] = []
        params: list[object] = []

        def _set(column: str, value: object) -> None:
            sets.append(f"{column}=%s")
            params.append(value)

        if patch.clock_in is not None:
            _set("clock_in", to_db_datetime(patch.clock_in))
        if patch.clock_out is not None:
            _set("clock_out", to_db_datetime(patch.clock_out))
        if patch.breaks is not None:
            _set("breaks", _breaks_to_json(patch.breaks))
        if patch.total_hours is not None:
            _set("total_hours", patch.total_hours)
        if patch.regular_hours is not None:
            _set("regular_hours", patch.regular_hours)
        if patch.overtime_hours is not None:
            _set("overtime_hours", patch.overtime_hours)
        if patch.status is not None:
            _set("status", patch.status.value)
        if patch.edited_by is not None:
            _set("edited_by", patch.edited_by)
        if patch.edit_reason is not None:
            _set("edit_reason", patch.edit_reason)
        _set("updated_at", to_db_datetime(now_utc()))

        where = "session_id=%s"
        if require_open:
            where += " AND clock_out IS NULL"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_sessions SET {', '.join(sets)} WHERE {where}", tuple(params + [session_id]))
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, session_id)

    def find_open_session(self, employee_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE employee_id=%s AND clock_out IS NULL
                ORDER BY clock_in ASC, session_id ASC
                LIMIT 1
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def find_open_sessions(self, employee_id: str) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE employee_id=%s AND clock_out IS NULL
                ORDER BY clock_in ASC, session_id ASC
                """,
                (employee_id,),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def find_all_open_sessions(self) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE clock_out IS NULL
                ORDER BY clock_in ASC
                """
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def query_by_employee_and_range(self, employee_id: str, start: datetime, end: datetime) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE employee_id=%s AND clock_in >= %s AND clock_in < %s
                ORDER BY clock_in ASC
                """,
                (employee_id, to_db_datetime(start), to_db_datetime(end)),
            )
            return [_row_to_session(r) for r in fetchall(cur)]
