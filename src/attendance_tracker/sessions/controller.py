from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_month
from ..common.http import body_timestamp, json_body, query_date
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import GeolocationError, ValidationError
from ..geolocation.provider import SubmittedPositionProvider
from .model import Break, Coordinates, session_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    clock = container.clock_service
    settings = container.settings

    def locate(payload: Optional[Mapping[str, Any]]) -> tuple[Optional[Coordinates], Optional[dict]]:
        """Run a submitted position through the geolocation gate."""
        if payload is None and not settings.geolocation_required:
            return None, None
        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("location must be an object")

        secure = request.is_secure or settings.allow_insecure_geolocation
        provider = SubmittedPositionProvider(payload) if payload is not None else None
        try:
            result = container.geolocation_gate.acquire(secure, provider=provider)
        except GeolocationError as e:
            if settings.geolocation_required:
                raise
            logger.info("Clock action continues without location: %s", e)
            return None, None
        warning = None
        if result.warning is not None:
            warning = {"accuracy": result.warning.accuracy_m, "message": result.warning.message}
        return result.coordinates, warning

    def parse_break(item: Mapping[str, Any], index: int) -> Break:
        if not isinstance(item, Mapping):
            raise ValidationError("breaks must be a list of objects")
        start = body_timestamp(item, "start_time", clock.tz)
        if start is None:
            raise ValidationError("break start_time is required")
        b = Break(break_id=str(item.get("id") or f"break_{index}"), start_time=start)
        end = body_timestamp(item, "end_time", clock.tz)
        return b.closed_at(end) if end is not None else b

    @app.get("/api/attendance/<employee_id>/status")
    def attendance_status(employee_id: str):
        status = clock.get_current_status(employee_id)
        return jsonify({"success": True, **status.to_dict()})

    @app.post("/api/attendance/clock-in")
    def attendance_clock_in():
        data = json_body()
        employee_id = require_non_empty(str(data.get("employee_id") or ""), "employee_id")
        timestamp = body_timestamp(data, "timestamp", clock.tz)
        coords, warning = locate(data.get("location"))

        session = clock.clock_in(
            employee_id,
            data.get("employee_name") or "",
            timestamp=timestamp,
            location=coords,
            notes=data.get("notes"),
        )
        if session is None:
            # Already clocked in: nothing written, hand back the current state.
            status = clock.get_current_status(employee_id)
            return jsonify({"success": True, "created": False, "status": status.to_dict()}), 200
        return jsonify({"success": True, "created": True, "record": session_to_dict(session), "warning": warning}), 201

    @app.post("/api/attendance/<session_id>/clock-out")
    def attendance_clock_out(session_id: str):
        data = json_body()
        timestamp = body_timestamp(data, "timestamp", clock.tz)
        coords, warning = locate(data.get("location"))
        session = clock.clock_out(session_id, timestamp=timestamp, location=coords, notes=data.get("notes"))
        return jsonify({"success": True, "record": session_to_dict(session), "warning": warning})

    @app.post("/api/attendance/<session_id>/break/start")
    def attendance_break_start(session_id: str):
        data = json_body()
        session = clock.start_break(session_id, timestamp=body_timestamp(data, "timestamp", clock.tz))
        return jsonify({"success": True, "record": session_to_dict(session)})

    @app.post("/api/attendance/<session_id>/break/end")
    def attendance_break_end(session_id: str):
        data = json_body()
        session = clock.end_break(session_id, timestamp=body_timestamp(data, "timestamp", clock.tz))
        return jsonify({"success": True, "record": session_to_dict(session)})

    @app.post("/api/attendance/cleanup-duplicates")
    def attendance_cleanup_duplicates():
        data = json_body()
        employee_id = require_non_empty(str(data.get("employee_id") or ""), "employee_id")
        report = container.reconciler.reconcile(employee_id)
        return jsonify(
            {
                "success": True,
                "kept_session_id": report.kept_session_id,
                "closed_session_ids": list(report.closed_session_ids),
                "cleaned": len(report.closed_session_ids),
            }
        )

    @app.get("/api/attendance/<employee_id>/sessions")
    def attendance_sessions(employee_id: str):
        today = container.calendar_service.today()
        start = query_date("start", today)
        end = query_date("end", start)
        sessions = clock.list_sessions(employee_id, start, end)
        return jsonify({"success": True, "records": [session_to_dict(s) for s in sessions]})

    @app.get("/api/attendance/<employee_id>/stats")
    def attendance_stats(employee_id: str):
        start = query_date("start")
        end = query_date("end")
        stats = container.stats_service.calculate_stats(employee_id, start, end)
        return jsonify({"success": True, "stats": stats.to_dict()})

    @app.get("/api/attendance/<employee_id>/calendar")
    def attendance_calendar(employee_id: str):
        month = request.args.get("month")
        if month:
            try:
                year, month_no = parse_month(month)
            except ValueError:
                raise ValidationError("Invalid month: expected YYYY-MM")
        else:
            today = container.calendar_service.today()
            year, month_no = today.year, today.month
        days = container.calendar_service.get_calendar_month(employee_id, year, month_no)
        return jsonify({"success": True, "month": f"{year:04d}-{month_no:02d}", "days": [d.to_dict() for d in days]})

    @app.patch("/api/attendance/sessions/<session_id>")
    def attendance_edit_session(session_id: str):
        data = json_body()
        breaks = None
        if data.get("breaks") is not None:
            breaks = [parse_break(item, i) for i, item in enumerate(data["breaks"])]
        session = clock.edit_session(
            session_id,
            edited_by=data.get("edited_by") or "",
            edit_reason=data.get("edit_reason") or "",
            clock_in=body_timestamp(data, "clock_in", clock.tz),
            clock_out=body_timestamp(data, "clock_out", clock.tz),
            breaks=breaks,
        )
        return jsonify({"success": True, "record": session_to_dict(session)})

    @app.post("/api/attendance/auto-clock-out")
    def attendance_auto_clock_out():
        closed = clock.auto_clock_out(cutoff=settings.auto_clock_out_time)
        return jsonify({"success": True, "closed": [s.session_id for s in closed]})
