from .engine import (
    DayStatus,
    build_calendar,
    build_calendar_month,
    derive_status,
    group_leaves_by_day,
    group_sessions_by_day,
    is_working_day,
)

__all__ = [
    "DayStatus",
    "build_calendar",
    "build_calendar_month",
    "derive_status",
    "group_leaves_by_day",
    "group_sessions_by_day",
    "is_working_day",
]
