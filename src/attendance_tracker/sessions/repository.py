from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Session, SessionClosure, SessionDraft, SessionPatch


class SessionStore(Protocol):
    """Record store for sessions.

    Writes are atomic per record; there are no cross-record transactions.
    """

    def create_session(self, draft: SessionDraft) -> Session:
        raise NotImplementedError

    def get_session(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def close_session(self, session_id: str, closure: SessionClosure) -> Optional[Session]:
        """Close the session only if it is still open.

        Returns the closed session, or None when it was already closed.
        """

        raise NotImplementedError

    def patch_session(self, session_id: str, patch: SessionPatch, *, require_open: bool = False) -> Optional[Session]:
        """Apply a partial update.

        With ``require_open`` the write only happens while clock_out is unset;
        None is returned when that condition fails or the id is unknown.
        """

        raise NotImplementedError

    def find_open_session(self, employee_id: str) -> Optional[Session]:
        raise NotImplementedError

    def find_open_sessions(self, employee_id: str) -> Sequence[Session]:
        raise NotImplementedError

    def find_all_open_sessions(self) -> Sequence[Session]:
        raise NotImplementedError

    def query_by_employee_and_range(self, employee_id: str, start: datetime, end: datetime) -> Sequence[Session]:
        """Sessions whose clock_in falls in ``[start, end)``, oldest first."""

        raise NotImplementedError
