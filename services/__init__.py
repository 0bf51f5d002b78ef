from .errors import BookingError, NotFound, InvalidRequest, Conflict, Unauthorized, Forbidden
