from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.constants import DUPLICATE_CLEANUP_REASON, SYSTEM_EDITOR
from ..core.enums import SessionStatus
from .model import Session, SessionClosure, SessionLocation, SessionNotes
from .repository import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileReport:
    employee_id: str
    kept_session_id: Optional[str]
    closed_session_ids: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.closed_session_ids)


class DuplicateReconciler:
    """Backstop for the one-open-session-per-employee rule.

    Concurrent clock-ins can leave several open sessions behind. The earliest
    one is kept; every other is closed as a zero-length edited record.
    Running it again on reconciled data changes nothing.
    """

    def __init__(self, sessions: SessionStore):
        self._sessions = sessions

    @staticmethod
    def _duplicate_closure(session: Session) -> SessionClosure:
        return SessionClosure(
            clock_out=session.clock_in,
            breaks=tuple(b.closed_at(session.clock_in) if b.is_open else b for b in session.breaks),
            total_hours=0.0,
            regular_hours=0.0,
            overtime_hours=0.0,
            status=SessionStatus.EDITED,
            location=SessionLocation(clock_in=session.location.clock_in),
            notes=SessionNotes(clock_in=session.notes.clock_in),
            edited_by=SYSTEM_EDITOR,
            edit_reason=DUPLICATE_CLEANUP_REASON,
        )

    def reconcile(self, employee_id: str) -> ReconcileReport:
        open_sessions = sorted(
            self._sessions.find_open_sessions(employee_id),
            key=lambda s: (s.clock_in, s.session_id),
        )
        if len(open_sessions) <= 1:
            kept = open_sessions[0].session_id if open_sessions else None
            return ReconcileReport(employee_id=employee_id, kept_session_id=kept)

        keep, duplicates = open_sessions[0], open_sessions[1:]
        closed: list[str] = []
        for dup in duplicates:
            if self._sessions.close_session(dup.session_id, self._duplicate_closure(dup)) is not None:
                closed.append(dup.session_id)

        logger.warning(
            "Closed %d duplicate open session(s) for employee %s, kept %s",
            len(closed),
            employee_id,
            keep.session_id,
        )
        return ReconcileReport(employee_id=employee_id, kept_session_id=keep.session_id, closed_session_ids=tuple(closed))
