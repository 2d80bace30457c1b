"""
Error kinds raised by the booking service and access control
"""


class BookingError(Exception):
    """Base error; carries the HTTP status it maps to"""
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BookingError):
    status_code = 400
    default_message = "Missing required fields"


class SlotConflict(BookingError):
    status_code = 400
    default_message = "Slot already booked"


class NotFound(BookingError):
    status_code = 404
    default_message = "Booking not found"


class InvalidTransition(BookingError):
    status_code = 409
    default_message = "Booking status cannot be changed"


class StoreUnavailable(BookingError):
    status_code = 500
    default_message = "Database error"


class Unauthorized(BookingError):
    status_code = 401
    default_message = "Authentication required"
