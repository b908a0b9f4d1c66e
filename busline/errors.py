class BookingError(Exception):
    """Base class for everything the wizard raises on purpose."""

    message = "Booking error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


# backend unreachable, timed out or answered with a non-2xx status
class NetworkFailure(BookingError):
    message = "The booking service is not reachable right now."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DataNotFound(BookingError):
    message = "Trip or seat information could not be found."


class ValidationFailure(BookingError):
    message = "Please correct the highlighted fields."

    def __init__(self, errors: dict[str, str], message: str | None = None):
        super().__init__(message)
        self.errors = errors


class SelectionLimitExceeded(BookingError):
    message = "You can select at most 4 seats."


class SeatUnavailable(BookingError):
    message = "This seat is already taken."

    def __init__(self, seat_no: int, message: str | None = None):
        super().__init__(message or f"Seat {seat_no} is already taken.")
        self.seat_no = seat_no


class IncompleteBookingData(BookingError):
    message = "Booking details were not found. Please start from the trip search."


class PrematureConfirmation(IncompleteBookingData):
    message = "Passenger details are required before the booking can be confirmed."


class PaymentDeclined(BookingError):
    message = "Payment could not be completed."
