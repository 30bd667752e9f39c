from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class AttendanceError(DomainError):
    """Check-in/check-out precondition failure.

    Every subclass carries a stable ``code`` so the HTTP layer can answer
    without matching on message text.
    """

    code = "attendance_error"


class AlreadyCheckedInError(AttendanceError):
    code = "already_checked_in"

    def __init__(self, message: str = "You are already checked in today."):
        super().__init__(message)


class InvalidOfficeError(AttendanceError):
    code = "invalid_office"

    def __init__(self, office_id: object, message: str | None = None):
        self.office_id = office_id
        super().__init__(message or "Invalid office selected.")


class OutOfRangeError(AttendanceError):
    """The submitted location lies outside the office geofence.

    ``distance`` is the live distance in whole meters, ``radius`` the
    office's configured admission radius.
    """

    code = "out_of_range"

    def __init__(self, *, distance: int, radius: int, action: str):
        self.distance = int(distance)
        self.radius = int(radius)
        self.action = action
        super().__init__(
            f"You are {self.distance}m away from the office. "
            f"Please move closer (within {self.radius}m) to {action}."
        )


class NoActiveSessionError(AttendanceError):
    code = "no_active_session"

    def __init__(self, message: str = "No active attendance found for today."):
        super().__init__(message)


class StorageError(DomainError):
    """Raised by session stores when a write loses a race."""


class SessionConflictError(StorageError):
    """An open session already exists for the employee on that day."""


class SessionNotFoundError(StorageError):
    """No session with the given id."""


class InvalidStateError(StorageError):
    """The session is not in the state the write expected (already completed)."""
