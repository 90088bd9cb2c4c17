class BookingError(Exception):
    """Base for errors surfaced verbatim to the caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFieldsError(BookingError):
    status_code = 400


class InvalidDateError(BookingError):
    status_code = 400


class SlotUnavailableError(BookingError):
    status_code = 400


class EmailNotVerifiedError(BookingError):
    status_code = 403


class SlotAlreadyBookedError(BookingError):
    status_code = 409
