"""
Booking error taxonomy.
Every failure raised by the availability and reservation core derives from
BookingError so the web layer can decide how to recover.
"""


class BookingError(Exception):
    """Base class for booking core errors."""


class InvalidDate(BookingError, ValueError):
    """A date could not be parsed (expected YYYY-MM-DD)."""

    def __init__(self, value, field: str = None):
        self.value = value
        self.field = field
        label = f'{field}: ' if field else ''
        super().__init__(f'{label}invalid date {value!r}, expected YYYY-MM-DD')


class InvalidRange(BookingError, ValueError):
    """A date range whose start is not strictly before its end."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f'start date {start} must be before end date {end}')


class ValidationFailed(BookingError, ValueError):
    """
    Guest or draft data failed validation.

    Attributes:
        field: First failing field
        reason: Message for that field
        errors: Mapping of every failing field to its message
    """

    def __init__(self, field: str, reason: str, errors: dict = None):
        self.field = field
        self.reason = reason
        self.errors = errors or {field: reason}
        super().__init__(f'{field}: {reason}')


class RoomNoLongerAvailable(BookingError):
    """The chosen room was booked by someone else before commit."""

    def __init__(self, room_id: int, date_range=None):
        self.room_id = room_id
        self.date_range = date_range
        super().__init__(f'room {room_id} is no longer available for {date_range}')


class StorageUnavailable(BookingError):
    """The persistence layer failed or timed out."""


class MissingDraft(BookingError):
    """A booking step was requested without the state it depends on."""
