class BookingError(Exception):
    """Base error for the scheduling core. Carries the HTTP status it maps to."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(BookingError):
    status_code = 404


class InvalidRequest(BookingError):
    status_code = 400


class Conflict(BookingError):
    status_code = 409


class Unauthorized(BookingError):
    status_code = 401


class Forbidden(BookingError):
    status_code = 403
