from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, tzinfo
from types import ModuleType
from typing import Optional

from .common.datetime_utils import get_zone, parse_hhmm
from .core.constants import (
    DEFAULT_AUTO_CLOCK_OUT_TIME,
    DEFAULT_GEO_ACCURACY_THRESHOLD_M,
    DEFAULT_GEO_TIMEOUT_SECONDS,
    DEFAULT_GRACE_MINUTES,
    DEFAULT_OVERTIME_THRESHOLD_HOURS,
    DEFAULT_SHIFT_START,
    DEFAULT_TIMEZONE,
)
from .daystatus.service import CalendarService
from .database.connection import DBConfig, DatabaseConnection
from .geolocation.gate import GeolocationGate
from .geolocation.geofence import Geofence
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .sessions.model import Coordinates
from .sessions.mysql_session_repository import MySQLSessionStore
from .sessions.reconciliation import DuplicateReconciler
from .sessions.repository import SessionStore
from .sessions.service import ClockService
from .shifts.model import ShiftPolicy
from .stats.calculator.standard_calculator import StandardHoursCalculator
from .stats.service import StatsService


@dataclass(frozen=True)
class AppSettings:
    """Typed view of the attendance keys in a settings module."""

    tz: tzinfo = field(default_factory=lambda: get_zone(DEFAULT_TIMEZONE))
    shift_policy: ShiftPolicy = field(default_factory=ShiftPolicy)
    auto_clock_out_time: time = DEFAULT_AUTO_CLOCK_OUT_TIME
    geolocation_required: bool = False
    geo_accuracy_threshold_m: float = DEFAULT_GEO_ACCURACY_THRESHOLD_M
    geo_timeout_seconds: float = DEFAULT_GEO_TIMEOUT_SECONDS
    geofence: Optional[Geofence] = None
    allow_insecure_geolocation: bool = False

    @classmethod
    def from_module(cls, settings: ModuleType) -> "AppSettings":
        geofence = None
        center = (getattr(settings, "GEOFENCE_CENTER", "") or "").strip()
        if center:
            lat, lng = (float(part) for part in center.split(","))
            geofence = Geofence(
                center=Coordinates(latitude=lat, longitude=lng),
                radius_m=float(getattr(settings, "GEOFENCE_RADIUS_M", 200)),
            )

        return cls(
            tz=get_zone(getattr(settings, "EMPLOYEE_TIMEZONE", DEFAULT_TIMEZONE)),
            shift_policy=ShiftPolicy(
                shift_start=parse_hhmm(getattr(settings, "SHIFT_START", DEFAULT_SHIFT_START.strftime("%H:%M"))),
                grace_minutes=int(getattr(settings, "GRACE_MINUTES", DEFAULT_GRACE_MINUTES)),
                overtime_threshold_hours=float(getattr(settings, "OVERTIME_THRESHOLD_HOURS", DEFAULT_OVERTIME_THRESHOLD_HOURS)),
            ),
            auto_clock_out_time=parse_hhmm(getattr(settings, "AUTO_CLOCK_OUT_TIME", "23:59")),
            geolocation_required=bool(getattr(settings, "GEOLOCATION_REQUIRED", False)),
            geo_accuracy_threshold_m=float(getattr(settings, "GEO_ACCURACY_THRESHOLD_M", DEFAULT_GEO_ACCURACY_THRESHOLD_M)),
            geo_timeout_seconds=float(getattr(settings, "GEO_TIMEOUT_SECONDS", DEFAULT_GEO_TIMEOUT_SECONDS)),
            geofence=geofence,
            allow_insecure_geolocation=bool(getattr(settings, "ALLOW_INSECURE_GEOLOCATION", False)),
        )


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    settings: AppSettings

    sessions_repo: SessionStore
    holidays_repo: HolidayRepository
    leaves_repo: Optional[LeaveRepository]

    clock_service: ClockService
    reconciler: DuplicateReconciler
    holiday_service: HolidayService
    calendar_service: CalendarService
    stats_service: StatsService
    geolocation_gate: GeolocationGate


def build_services(
    *,
    sessions: SessionStore,
    holidays: HolidayRepository,
    leaves: Optional[LeaveRepository] = None,
    settings: Optional[AppSettings] = None,
    conn: Optional[DatabaseConnection] = None,
    clock=None,
) -> Container:
    """Wire services around already-built repositories."""
    settings = settings or AppSettings()
    calculator = StandardHoursCalculator(settings.shift_policy)

    clock_service = ClockService(sessions, tz=settings.tz, calculator=calculator, clock=clock)
    return Container(
        conn=conn,
        settings=settings,
        sessions_repo=sessions,
        holidays_repo=holidays,
        leaves_repo=leaves,
        clock_service=clock_service,
        reconciler=DuplicateReconciler(sessions),
        holiday_service=HolidayService(holidays),
        calendar_service=CalendarService(clock_service, holidays, leaves, now=clock),
        stats_service=StatsService(clock_service, holidays, leaves, calculator=calculator, now=clock),
        geolocation_gate=GeolocationGate(
            timeout_seconds=settings.geo_timeout_seconds,
            accuracy_threshold_m=settings.geo_accuracy_threshold_m,
            geofence=settings.geofence,
            clock=clock,
        ),
    )


def build_container(*, db_config: dict, settings: Optional[AppSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        sessions=MySQLSessionStore(conn),
        holidays=MySQLHolidayRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        settings=settings,
        conn=conn,
    )
