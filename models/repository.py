"""
Reservation repository interface.

The booking core talks to persistence only through this capability. Two
variants exist and one is chosen when the application is built:

- SQLiteReservationRepository (models/sqlite_repository.py): the real store
- MemoryReservationRepository (models/memory_repository.py): fixtures, tests

Rows are returned as plain dicts with the column names of the schema.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from .date_range import DateRange


class ReservationRepository(ABC):
    """Rooms, reservations and room restrictions."""

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run the enclosed calls as one atomic unit.

        Commits when the block exits normally, rolls back and re-raises
        otherwise. Concurrent transactions on the same store are serialized.
        """

    # -------------------------------------------------------------------------
    # Rooms
    # -------------------------------------------------------------------------

    @abstractmethod
    def all_rooms(self) -> list:
        """All rooms ordered by room_name."""

    @abstractmethod
    def get_room_by_id(self, room_id: int) -> Optional[dict]:
        """Single room or None."""

    # -------------------------------------------------------------------------
    # Restrictions
    # -------------------------------------------------------------------------

    @abstractmethod
    def all_restrictions(self) -> list:
        """Restriction reasons (Reservation, Owner Block, ...)."""

    @abstractmethod
    def find_overlapping(self, room_id: int, date_range: DateRange) -> list:
        """Room restrictions of room_id whose interval overlaps date_range."""

    @abstractmethod
    def find_free_rooms(self, date_range: DateRange) -> list:
        """Rooms with no restriction overlapping date_range, by room_name."""

    @abstractmethod
    def insert_room_restriction(
        self,
        room_id: int,
        date_range: DateRange,
        restriction_id: int,
        reservation_id: int = None
    ) -> int:
        """Insert a room restriction and return its id."""

    # -------------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------------

    @abstractmethod
    def insert_reservation(self, reservation: dict) -> int:
        """Insert a reservation row and return its generated id."""

    @abstractmethod
    def get_reservation_by_id(self, reservation_id: int) -> Optional[dict]:
        """Reservation joined with its room_name, or None."""

    @abstractmethod
    def all_reservations(self, processed: Optional[bool] = None) -> list:
        """
        Reservations with room_name, ordered by start_date.

        Args:
            processed: None for all, False for new only, True for processed only
        """

    @abstractmethod
    def set_processed(self, reservation_id: int, processed: bool = True) -> bool:
        """Mark a reservation processed (or new again). False if it does not exist."""

    @abstractmethod
    def delete_reservation(self, reservation_id: int) -> bool:
        """
        Delete a reservation and the room restriction derived from it, which
        frees its dates. False if it does not exist.
        """
