from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, query_date
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    holidays = container.holiday_service

    @app.get("/api/holidays")
    def holidays_list():
        start = query_date("start") if request.args.get("start") else None
        end = query_date("end") if request.args.get("end") else None
        items = holidays.list_holidays(start=start, end=end)
        return jsonify({"success": True, "holidays": [h.to_dict() for h in items]})

    @app.post("/api/holidays")
    def holidays_create():
        data = json_body()
        try:
            holiday_date = parse_iso_date(str(data.get("date") or ""))
        except ValueError:
            raise ValidationError("Invalid date: expected YYYY-MM-DD")
        holiday = holidays.create(
            holiday_date=holiday_date,
            name=data.get("name") or "",
            description=data.get("description"),
        )
        return jsonify({"success": True, "holiday": holiday.to_dict()}), 201

    @app.put("/api/holidays/<int:holiday_id>")
    def holidays_update(holiday_id: int):
        data = json_body()
        holiday = holidays.update(holiday_id, name=data.get("name") or "", description=data.get("description"))
        return jsonify({"success": True, "holiday": holiday.to_dict()})

    @app.delete("/api/holidays/<int:holiday_id>")
    def holidays_delete(holiday_id: int):
        holidays.delete(holiday_id)
        return jsonify({"success": True})
