"""
Reservation error taxonomy.

Every error raised by the reservation core is scoped to a single request.
The app registers one error handler for ReservationError that turns the
exception into the standard JSON error envelope using its status_code and
payload (e.g. the conflicting reservation summary).
"""


class ReservationError(Exception):
    """Base class for recoverable reservation errors."""

    status_code = 400

    def __init__(self, message: str, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload


class ValidationError(ReservationError):
    """Malformed or missing input, interval outside hours, bad duration or capacity."""

    status_code = 400


class ConflictError(ReservationError):
    """Candidate interval overlaps an active reservation on the same resource."""

    status_code = 400

    def __init__(self, message: str, conflict: dict = None, **payload):
        super().__init__(message, conflict=conflict, **payload)
        self.conflict = conflict


class InvalidTransitionError(ReservationError):
    """Status change is not legal from the current status."""

    status_code = 400

    def __init__(self, message: str, current_status: str = None, **payload):
        super().__init__(message, current_status=current_status, **payload)
        self.current_status = current_status


class ResourceUnavailableError(ReservationError):
    """Resource does not exist or is inactive."""

    status_code = 404


class NotFoundError(ReservationError):
    """Reservation or account id is unknown."""

    status_code = 404


class PermissionDeniedError(ReservationError):
    """Actor is not allowed to act on the reservation."""

    status_code = 403
