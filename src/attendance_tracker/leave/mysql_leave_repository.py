from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import LeaveRecord
from .repository import LeaveRepository


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, employee_id: str, start: date, end: date) -> Sequence[LeaveRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT request_id, employee_id, start_date, end_date, half_day, reason, status
                FROM leave_requests
                WHERE employee_id=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date ASC
                """,
                (employee_id, end, start),
            )
            return [
                LeaveRecord(
                    request_id=int(r["request_id"]),
                    employee_id=str(r["employee_id"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    status=RequestStatus(r["status"]),
                    half_day=bool(r.get("half_day")),
                    reason=r.get("reason"),
                )
                for r in fetchall(cur)
            ]
