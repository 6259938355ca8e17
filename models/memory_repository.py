"""
In-memory reservation repository.

Same contract as the SQLite repository, kept in process memory. Used for
fixtures and tests, and selectable with REPOSITORY_BACKEND = 'memory'.
"""

import copy
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from .date_range import DateRange, overlaps, parse_date
from .repository import ReservationRepository


def _now() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


class MemoryReservationRepository(ReservationRepository):
    """
    Repository backed by plain lists of dicts.

    Args:
        rooms: Room names to create (defaults to the seed rooms)
        restrictions: Restriction names to create (defaults to the seed set)
    """

    def __init__(self, rooms: list = None, restrictions: list = None):
        from database.seed import ROOMS, RESTRICTIONS

        self._lock = threading.RLock()
        self._rooms = []
        self._restrictions = []
        self._reservations = []
        self._room_restrictions = []
        self._next_ids = {'rooms': 1, 'restrictions': 1, 'reservations': 1, 'room_restrictions': 1}

        for room_name in (ROOMS if rooms is None else rooms):
            self.add_room(room_name)
        for restriction_name in (RESTRICTIONS if restrictions is None else restrictions):
            restriction_id = self._next_id('restrictions')
            self._restrictions.append({'id': restriction_id, 'restriction_name': restriction_name})

    def _next_id(self, table: str, wanted: int = None) -> int:
        new_id = wanted if wanted is not None else self._next_ids[table]
        self._next_ids[table] = max(self._next_ids[table], new_id + 1)
        return new_id

    def add_room(self, room_name: str, room_id: int = None) -> int:
        """Add a room (fixture helper). Returns the room id."""
        with self._lock:
            new_id = self._next_id('rooms', room_id)
            stamp = _now()
            self._rooms.append({
                'id': new_id,
                'room_name': room_name,
                'created_at': stamp,
                'updated_at': stamp,
            })
            return new_id

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @contextmanager
    def transaction(self):
        with self._lock:
            snapshot = (
                copy.deepcopy(self._reservations),
                copy.deepcopy(self._room_restrictions),
                dict(self._next_ids),
            )
            try:
                yield
            except Exception:
                self._reservations, self._room_restrictions, self._next_ids = snapshot
                raise

    # =========================================================================
    # ROOMS
    # =========================================================================

    def all_rooms(self) -> list:
        with self._lock:
            return [dict(room) for room in sorted(self._rooms, key=lambda r: r['room_name'])]

    def get_room_by_id(self, room_id: int) -> Optional[dict]:
        with self._lock:
            for room in self._rooms:
                if room['id'] == room_id:
                    return dict(room)
        return None

    # =========================================================================
    # RESTRICTIONS
    # =========================================================================

    def all_restrictions(self) -> list:
        with self._lock:
            return [dict(r) for r in self._restrictions]

    def _restriction_name(self, restriction_id: int) -> Optional[str]:
        for restriction in self._restrictions:
            if restriction['id'] == restriction_id:
                return restriction['restriction_name']
        return None

    @staticmethod
    def _range_of(row: dict) -> DateRange:
        return DateRange(parse_date(row['start_date']), parse_date(row['end_date']))

    def find_overlapping(self, room_id: int, date_range: DateRange) -> list:
        with self._lock:
            found = []
            for row in self._room_restrictions:
                if row['room_id'] == room_id and overlaps(self._range_of(row), date_range):
                    item = dict(row)
                    item['restriction_name'] = self._restriction_name(row['restriction_id'])
                    found.append(item)
            return sorted(found, key=lambda r: r['start_date'])

    def find_free_rooms(self, date_range: DateRange) -> list:
        with self._lock:
            blocked = {
                row['room_id'] for row in self._room_restrictions
                if overlaps(self._range_of(row), date_range)
            }
            return [room for room in self.all_rooms() if room['id'] not in blocked]

    def insert_room_restriction(
        self,
        room_id: int,
        date_range: DateRange,
        restriction_id: int,
        reservation_id: int = None
    ) -> int:
        with self._lock:
            start, end = date_range.isoformat()
            new_id = self._next_id('room_restrictions')
            stamp = _now()
            self._room_restrictions.append({
                'id': new_id,
                'start_date': start,
                'end_date': end,
                'room_id': room_id,
                'restriction_id': restriction_id,
                'reservation_id': reservation_id,
                'created_at': stamp,
                'updated_at': stamp,
            })
            return new_id

    # =========================================================================
    # RESERVATIONS
    # =========================================================================

    def insert_reservation(self, reservation: dict) -> int:
        with self._lock:
            new_id = self._next_id('reservations')
            stamp = _now()
            self._reservations.append({
                'id': new_id,
                'first_name': reservation['first_name'],
                'last_name': reservation['last_name'],
                'email': reservation['email'],
                'phone': reservation.get('phone') or '',
                'start_date': reservation['start_date'],
                'end_date': reservation['end_date'],
                'room_id': reservation['room_id'],
                'processed': 0,
                'created_at': stamp,
                'updated_at': stamp,
            })
            return new_id

    def get_reservation_by_id(self, reservation_id: int) -> Optional[dict]:
        with self._lock:
            for row in self._reservations:
                if row['id'] == reservation_id:
                    item = dict(row)
                    room = self.get_room_by_id(row['room_id'])
                    item['room_name'] = room['room_name'] if room else None
                    return item
        return None

    def all_reservations(self, processed: Optional[bool] = None) -> list:
        with self._lock:
            rows = [
                self.get_reservation_by_id(row['id']) for row in self._reservations
                if processed is None or bool(row['processed']) == processed
            ]
            return sorted(rows, key=lambda r: (r['start_date'], r['id']))

    def set_processed(self, reservation_id: int, processed: bool = True) -> bool:
        with self._lock:
            for row in self._reservations:
                if row['id'] == reservation_id:
                    row['processed'] = 1 if processed else 0
                    row['updated_at'] = _now()
                    return True
        return False

    def delete_reservation(self, reservation_id: int) -> bool:
        with self._lock:
            remaining = [r for r in self._reservations if r['id'] != reservation_id]
            if len(remaining) == len(self._reservations):
                return False
            self._reservations = remaining
            self._room_restrictions = [
                r for r in self._room_restrictions if r['reservation_id'] != reservation_id
            ]
            return True
