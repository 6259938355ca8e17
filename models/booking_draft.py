"""
Booking draft: the in-progress reservation held in the browser session.
"""

from datetime import date

from .date_range import DateRange, parse_date
from .exceptions import MissingDraft

# Flow states
NO_DRAFT = 'no_draft'
RANGE_CHOSEN = 'range_chosen'
ROOM_CHOSEN = 'room_chosen'
DETAILS_ENTERED = 'details_entered'
COMMITTED = 'committed'

STATES = (NO_DRAFT, RANGE_CHOSEN, ROOM_CHOSEN, DETAILS_ENTERED, COMMITTED)

GUEST_FIELDS = ('first_name', 'last_name', 'email', 'phone')


class BookingDraft:
    """
    Transient reservation state between flow steps.

    Stored in the session as a JSON-safe dict (dates as YYYY-MM-DD strings).
    """

    def __init__(
        self,
        state: str = NO_DRAFT,
        start_date: date = None,
        end_date: date = None,
        room_id: int = None,
        room_ids: list = None,
        **guest
    ):
        self.state = state
        self.start_date = start_date
        self.end_date = end_date
        self.room_id = room_id
        self.room_ids = list(room_ids or [])
        self.first_name = guest.get('first_name') or ''
        self.last_name = guest.get('last_name') or ''
        self.email = guest.get('email') or ''
        self.phone = guest.get('phone') or ''

    @property
    def date_range(self) -> DateRange:
        """The chosen stay; MissingDraft if no dates were chosen yet."""
        if self.start_date is None or self.end_date is None:
            raise MissingDraft('no date range in the booking draft')
        return DateRange(self.start_date, self.end_date)

    @property
    def guest(self) -> dict:
        return {field: getattr(self, field) for field in GUEST_FIELDS}

    def update_guest(self, fields: dict):
        for field in GUEST_FIELDS:
            value = fields.get(field)
            setattr(self, field, value.strip() if isinstance(value, str) else '')

    def to_session(self) -> dict:
        return {
            'state': self.state,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'room_id': self.room_id,
            'room_ids': list(self.room_ids),
            **self.guest,
        }

    @classmethod
    def from_session(cls, data: dict) -> 'BookingDraft':
        start = data.get('start_date')
        end = data.get('end_date')
        guest = {field: data.get(field) for field in GUEST_FIELDS}
        return cls(
            state=data.get('state', NO_DRAFT),
            start_date=parse_date(start) if start else None,
            end_date=parse_date(end) if end else None,
            room_id=data.get('room_id'),
            room_ids=data.get('room_ids'),
            **guest
        )

    def __repr__(self):
        return (f'BookingDraft(state={self.state!r}, room_id={self.room_id!r}, '
                f'start_date={self.start_date!r}, end_date={self.end_date!r})')
