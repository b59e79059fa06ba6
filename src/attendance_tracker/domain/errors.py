"""Exceptions raised by the attendance core."""


class AttendanceError(Exception):
    """Base exception for attendance rule violations."""


class UnauthorizedError(AttendanceError):
    """Raised when the acting identity lacks the required role."""


class InvalidTokenError(AttendanceError):
    """Raised when a check-in payload cannot be parsed."""


class SessionInactiveError(AttendanceError):
    """Raised when a session does not exist or has already expired."""


class SessionNotFoundError(AttendanceError):
    """Raised when a session id does not resolve to a session."""


class OutOfRangeError(AttendanceError):
    """Raised when a check-in location is too far from the reference point."""


class NotEnrolledError(AttendanceError):
    """Raised when the student has no ledger row for the session."""


class AlreadyEnrolledError(AttendanceError):
    """Raised when the student already has a ledger row for the session."""


class StoreError(AttendanceError):
    """Raised when the persistence layer fails or returns nothing."""


class SessionIdConflictError(StoreError):
    """Raised when an insert collides with an existing session id."""


class NotificationFailure(AttendanceError):
    """Raised when a reminder cannot be persisted or forwarded."""
