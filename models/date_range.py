"""
Half-open date ranges.

A stay from day X to day Y occupies nights X through Y-1, so a range is
[start, end): the checkout day of one stay may be the check-in day of the next.
"""

import re
from datetime import date, datetime

from .exceptions import InvalidDate, InvalidRange

DATE_FORMAT = '%Y-%m-%d'
DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


def parse_date(value, field: str = None) -> date:
    """
    Parse a YYYY-MM-DD string into a date.

    Args:
        value: Date string (a date instance is returned as is)
        field: Field name used in the error message

    Returns:
        date: Parsed date

    Raises:
        InvalidDate: If the value is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise InvalidDate(value, field)
    # strptime alone accepts unpadded months and days (2025-6-1)
    if not DATE_PATTERN.fullmatch(value.strip()):
        raise InvalidDate(value, field)
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidDate(value, field) from None


def overlaps(first: 'DateRange', second: 'DateRange') -> bool:
    """True iff the two half-open ranges share at least one night."""
    return first.start < second.end and second.start < first.end


class DateRange:
    """Immutable half-open date range [start, end)."""

    __slots__ = ('start', 'end')

    def __init__(self, start: date, end: date):
        if start >= end:
            raise InvalidRange(start, end)
        object.__setattr__(self, 'start', start)
        object.__setattr__(self, 'end', end)

    def __setattr__(self, name, value):
        raise AttributeError('DateRange is immutable')

    @classmethod
    def parse(cls, start, end) -> 'DateRange':
        """Build a range from two YYYY-MM-DD strings."""
        return cls(parse_date(start, 'start'), parse_date(end, 'end'))

    @classmethod
    def coerce(cls, value) -> 'DateRange':
        """Accept a DateRange or a (start, end) pair."""
        if isinstance(value, cls):
            return value
        start, end = value
        return cls.parse(start, end)

    def overlaps(self, other: 'DateRange') -> bool:
        return overlaps(self, other)

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def isoformat(self) -> tuple:
        return self.start.strftime(DATE_FORMAT), self.end.strftime(DATE_FORMAT)

    def __eq__(self, other):
        if not isinstance(other, DateRange):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return f'DateRange({self.start.isoformat()}, {self.end.isoformat()})'

    def __str__(self):
        return f'[{self.start.isoformat()}, {self.end.isoformat()})'
