"""
Room availability queries.

Availability is computed on demand from the room_restrictions table. Answers
given here are advisory: the reservation writer re-checks inside its own
transaction before committing.
"""

from .date_range import DateRange
from .repository import ReservationRepository


class AvailabilityEngine:
    """Answers availability questions against a reservation repository."""

    def __init__(self, repository: ReservationRepository):
        self.repository = repository

    def is_room_available(self, room_id: int, date_range) -> bool:
        """
        Check whether a room is free for a whole date range.

        Args:
            room_id: Room ID
            date_range: DateRange or (start, end) pair

        Returns:
            bool: True if no restriction of the room overlaps the range

        Raises:
            InvalidRange: If start is not before end (checked before any query)
            StorageUnavailable: If the store fails
        """
        date_range = DateRange.coerce(date_range)
        return not self.repository.find_overlapping(room_id, date_range)

    def search_all_rooms(self, date_range) -> list:
        """
        Get every room free for a date range, ordered by room name.

        An empty list means no availability; it is not an error.
        """
        date_range = DateRange.coerce(date_range)
        return self.repository.find_free_rooms(date_range)

    def restrictions_for_room(self, room_id: int, date_range) -> list:
        """Get the restrictions blocking a room within a date range."""
        date_range = DateRange.coerce(date_range)
        return self.repository.find_overlapping(room_id, date_range)
