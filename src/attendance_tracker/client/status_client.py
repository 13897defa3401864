from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_utc
from ..core.enums import ClockState
from ..core.exceptions import ActionInFlight, DomainError, GeolocationError, NoActiveSession
from ..geolocation.gate import GeolocationGate
from ..geolocation.model import AccuracyWarning
from ..sessions.model import Coordinates, CurrentStatus, Session
from ..sessions.reconciliation import DuplicateReconciler

logger = logging.getLogger(__name__)


class AttendanceApi(Protocol):
    """Clock operations the client drives; ``ClockService`` satisfies it in-process."""

    def get_current_status(self, employee_id: str, *, now: Optional[datetime] = None) -> CurrentStatus:
        raise NotImplementedError

    def clock_in(self, employee_id: str, employee_name: str = "", timestamp: Optional[datetime] = None,
                 location: Optional[Coordinates] = None, notes: Optional[str] = None) -> Optional[Session]:
        raise NotImplementedError

    def clock_out(self, session_id: str, timestamp: Optional[datetime] = None,
                  location: Optional[Coordinates] = None, notes: Optional[str] = None) -> Session:
        raise NotImplementedError

    def start_break(self, session_id: str, timestamp: Optional[datetime] = None) -> Session:
        raise NotImplementedError

    def end_break(self, session_id: str, timestamp: Optional[datetime] = None) -> Session:
        raise NotImplementedError


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    status: CurrentStatus
    session: Optional[Session] = None
    created: bool = False
    error: Optional[DomainError] = None
    warning: Optional[AccuracyWarning] = None


class AttendanceStatusClient:
    """Local view of one employee's clock state with optimistic updates.

    The cached status is only a hint for rendering. Actions on the open
    session re-read the store to find it. After every acknowledged mutation
    the cache is replaced by a fresh ``get_current_status``; after a failed
    one it is rolled back to what it was before the action.
    """

    def __init__(
        self,
        api: AttendanceApi,
        employee_id: str,
        employee_name: str = "",
        *,
        gate: Optional[GeolocationGate] = None,
        geolocation_required: bool = False,
        secure_context: bool = True,
        reconciler: Optional[DuplicateReconciler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._api = api
        self.employee_id = employee_id
        self.employee_name = employee_name
        self._gate = gate
        self._geolocation_required = geolocation_required
        self._secure_context = secure_context
        self._reconciler = reconciler
        self._clock = clock or now_utc
        self._status = CurrentStatus.not_clocked_in()
        self._in_flight = False
        self._stale = True

    @property
    def status(self) -> CurrentStatus:
        return self._status

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def stale(self) -> bool:
        """True while the cached status is a guess the store has not confirmed."""
        return self._stale

    def refresh(self) -> CurrentStatus:
        self._status = self._api.get_current_status(self.employee_id)
        self._stale = False
        return self._status

    def mount(self) -> CurrentStatus:
        """Initial load: clean up duplicate open sessions, then read the store."""
        if self._reconciler is not None:
            self._reconciler.reconcile(self.employee_id)
        return self.refresh()

    def clock_in(self, notes: Optional[str] = None) -> ActionResult:
        ts = self._clock()
        return self._run(
            lambda current: CurrentStatus(state=ClockState.CLOCKED_IN, clock_in_time=ts),
            lambda _, location: self._api.clock_in(self.employee_id, self.employee_name, ts, location, notes),
            locate=True,
        )

    def clock_out(self, notes: Optional[str] = None) -> ActionResult:
        ts = self._clock()
        return self._run(
            lambda current: CurrentStatus(
                state=ClockState.CLOCKED_OUT,
                current_record_id=current.current_record_id,
                clock_in_time=current.clock_in_time,
            ),
            lambda session_id, location: self._api.clock_out(session_id, ts, location, notes),
            locate=True,
            targets_session=True,
        )

    def start_break(self) -> ActionResult:
        ts = self._clock()
        return self._run(
            lambda current: CurrentStatus(
                state=ClockState.ON_BREAK,
                current_record_id=current.current_record_id,
                clock_in_time=current.clock_in_time,
                break_start_time=ts,
            ),
            lambda session_id, _: self._api.start_break(session_id, ts),
            targets_session=True,
        )

    def end_break(self) -> ActionResult:
        ts = self._clock()
        return self._run(
            lambda current: CurrentStatus(
                state=ClockState.CLOCKED_IN,
                current_record_id=current.current_record_id,
                clock_in_time=current.clock_in_time,
            ),
            lambda session_id, _: self._api.end_break(session_id, ts),
            targets_session=True,
        )

    def _fail(self, error: DomainError) -> ActionResult:
        return ActionResult(ok=False, status=self._status, error=error)

    def _locate(self) -> tuple[Optional[Coordinates], Optional[AccuracyWarning]]:
        if self._gate is None:
            return None, None
        try:
            result = self._gate.acquire(self._secure_context)
        except GeolocationError as e:
            if self._geolocation_required:
                raise
            logger.info("Continuing without location: %s", e)
            return None, None
        return result.coordinates, result.warning

    def _resync(self, session: Optional[Session]) -> None:
        try:
            self.refresh()
        except DomainError as e:
            logger.warning("Status refresh failed for employee %s: %s", self.employee_id, e)
            if session is not None:
                # The acknowledged record is the best known truth.
                self._status = CurrentStatus.from_session(session)
                self._stale = False
            else:
                self._stale = True

    def _run(
        self,
        optimistic: Callable[[CurrentStatus], CurrentStatus],
        mutation: Callable[[Optional[str], Optional[Coordinates]], Optional[Session]],
        *,
        locate: bool = False,
        targets_session: bool = False,
    ) -> ActionResult:
        if self._in_flight:
            return self._fail(ActionInFlight("Another clock action is still in progress"))

        self._in_flight = True
        try:
            current = self._status
            if targets_session:
                # The record to act on comes from the store, never from the cache.
                try:
                    current = self.refresh()
                except DomainError as e:
                    return self._fail(e)
                if not current.has_open_session:
                    return self._fail(NoActiveSession("No active attendance record"))

            location, warning = None, None
            if locate:
                try:
                    location, warning = self._locate()
                except DomainError as e:
                    return self._fail(e)

            previous, previous_stale = self._status, self._stale
            guess = optimistic(current)
            self._status = guess
            self._stale = True
            try:
                session = mutation(current.current_record_id, location)
            except DomainError as e:
                self._status, self._stale = previous, previous_stale
                logger.info("Rolled back %s for employee %s: %s", guess.state.value, self.employee_id, e)
                return self._fail(e)
            except Exception:
                self._status, self._stale = previous, previous_stale
                raise

            # Resynchronize only after the store acknowledged the write.
            self._resync(session)
            return ActionResult(
                ok=True,
                status=self._status,
                session=session,
                created=session is not None,
                warning=warning,
            )
        finally:
            self._in_flight = False
