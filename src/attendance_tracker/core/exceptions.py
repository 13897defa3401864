from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when an action does not fit the current session state."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class StoreError(DomainError):
    """Raised when the record store cannot be reached or rejects a write."""


class ClockOutBeforeClockIn(ValidationError):
    pass


class InvalidCoordinates(ValidationError):
    pass


class DayAlreadyClosed(ValidationError):
    """The employee already clocked out today; the day is terminal."""


class NoActiveSession(ConflictError):
    pass


class BreakAlreadyOpen(ConflictError):
    pass


class NoOpenBreak(ConflictError):
    pass


class ActionInFlight(ConflictError):
    """A second clock action was requested while one is still pending."""


class SessionNotFound(NotFoundError):
    pass


class HolidayNotFound(NotFoundError):
    pass


class GeolocationError(DomainError):
    """Environment failure while acquiring a position fix.

    Retryable by explicit user action only; ``remediation`` is shown to the user.
    """

    remediation = "Try again."

    def __init__(self, message: str = "", *, remediation: str | None = None):
        super().__init__(message or self.__class__.__name__)
        if remediation is not None:
            self.remediation = remediation


class InsecureContext(GeolocationError):
    remediation = "Open the application over HTTPS to enable location access."


class PermissionDenied(GeolocationError):
    remediation = "Allow location access for this site in your browser settings."


class PositionUnavailable(GeolocationError):
    remediation = "Move to an area with better signal or enable location services."


class GeolocationTimeout(GeolocationError):
    remediation = "Location took too long to resolve. Try again."


class OutsideGeofence(GeolocationError):
    remediation = "Clock actions are only allowed at the workplace."
