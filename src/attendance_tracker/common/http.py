"""JSON helpers shared by the Flask controllers."""
from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Any, Mapping, Optional

from flask import jsonify, request

from ..core.exceptions import (
    ConflictError,
    DomainError,
    GeolocationError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_timestamp

logger = logging.getLogger(__name__)


def status_code_for(error: DomainError) -> int:
    if isinstance(error, GeolocationError):
        return 422
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ConflictError):
        return 409
    if isinstance(error, StoreError):
        return 503
    return 400


def error_response(error: DomainError):
    code = status_code_for(error)
    body: dict[str, Any] = {"success": False, "error": type(error).__name__, "message": str(error)}
    if isinstance(error, GeolocationError):
        body["remediation"] = error.remediation
    if code >= 500:
        logger.error("Store failure: %s", error)
    return jsonify(body), code


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str, default: Optional[date] = None) -> date:
    value = request.args.get(name)
    if not value:
        if default is None:
            raise ValidationError(f"Missing query parameter: {name}")
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected YYYY-MM-DD")


def body_timestamp(data: Mapping[str, Any], key: str, tz: tzinfo) -> Optional[datetime]:
    value = data.get(key)
    if value in (None, ""):
        return None
    try:
        return parse_timestamp(str(value), tz)
    except ValueError:
        raise ValidationError(f"Invalid {key}: expected an ISO-8601 timestamp")
