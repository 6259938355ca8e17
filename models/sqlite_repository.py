"""
SQLite-backed reservation repository.
Availability queries and the reservation write path against the real store.
"""

import logging
import sqlite3
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Optional

from .date_range import DateRange
from .exceptions import StorageUnavailable
from .repository import ReservationRepository

logger = logging.getLogger(__name__)


def storage_errors(func):
    """Translate sqlite3 failures (including lock timeouts) to StorageUnavailable."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as e:
            logger.error(f'Storage error in {func.__name__}: {e}')
            raise StorageUnavailable(str(e)) from e
    return wrapper


class SQLiteReservationRepository(ReservationRepository):
    """
    Repository over a sqlite3 connection.

    Args:
        get_connection: Callable returning the connection to use. In the web
            app this is database.get_db, which binds one connection per
            request/app context.
    """

    def __init__(self, get_connection: Callable[[], sqlite3.Connection] = None):
        if get_connection is None:
            from database import get_db
            get_connection = get_db
        self._get_connection = get_connection

    @property
    def db(self) -> sqlite3.Connection:
        return self._get_connection()

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @contextmanager
    def transaction(self):
        db = self.db
        try:
            # Take the write lock up front so the availability re-check and
            # the inserts see the same state.
            db.execute('BEGIN IMMEDIATE')
        except sqlite3.Error as e:
            logger.error(f'Could not start transaction: {e}')
            raise StorageUnavailable(str(e)) from e

        try:
            yield
            db.commit()
        except sqlite3.Error as e:
            self._rollback(db)
            raise StorageUnavailable(str(e)) from e
        except Exception:
            self._rollback(db)
            raise

    @staticmethod
    def _rollback(db):
        try:
            db.rollback()
        except sqlite3.Error as e:
            logger.error(f'Rollback failed: {e}')

    # =========================================================================
    # ROOMS
    # =========================================================================

    @storage_errors
    def all_rooms(self) -> list:
        cursor = self.db.execute('''
            SELECT id, room_name, created_at, updated_at
            FROM rooms
            ORDER BY room_name
        ''')
        return [dict(row) for row in cursor.fetchall()]

    @storage_errors
    def get_room_by_id(self, room_id: int) -> Optional[dict]:
        cursor = self.db.execute('''
            SELECT id, room_name, created_at, updated_at
            FROM rooms
            WHERE id = ?
        ''', (room_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    # =========================================================================
    # RESTRICTIONS
    # =========================================================================

    @storage_errors
    def all_restrictions(self) -> list:
        cursor = self.db.execute(
            'SELECT id, restriction_name FROM restrictions ORDER BY id'
        )
        return [dict(row) for row in cursor.fetchall()]

    @storage_errors
    def find_overlapping(self, room_id: int, date_range: DateRange) -> list:
        """
        Get restrictions of a room overlapping a date range.

        Two half-open ranges overlap iff each starts before the other ends,
        so a restriction ending on the range's start day does not count.

        Args:
            room_id: Room ID
            date_range: Requested stay

        Returns:
            list: Restriction rows ordered by start_date
        """
        start, end = date_range.isoformat()
        cursor = self.db.execute('''
            SELECT rr.id, rr.start_date, rr.end_date, rr.room_id,
                   rr.restriction_id, rr.reservation_id,
                   r.restriction_name
            FROM room_restrictions rr
            LEFT JOIN restrictions r ON rr.restriction_id = r.id
            WHERE rr.room_id = ?
              AND rr.start_date < ?
              AND rr.end_date > ?
            ORDER BY rr.start_date
        ''', (room_id, end, start))
        return [dict(row) for row in cursor.fetchall()]

    @storage_errors
    def find_free_rooms(self, date_range: DateRange) -> list:
        start, end = date_range.isoformat()
        cursor = self.db.execute('''
            SELECT rm.id, rm.room_name, rm.created_at, rm.updated_at
            FROM rooms rm
            WHERE NOT EXISTS (
                SELECT 1 FROM room_restrictions rr
                WHERE rr.room_id = rm.id
                  AND rr.start_date < ?
                  AND rr.end_date > ?
            )
            ORDER BY rm.room_name
        ''', (end, start))
        return [dict(row) for row in cursor.fetchall()]

    @storage_errors
    def insert_room_restriction(
        self,
        room_id: int,
        date_range: DateRange,
        restriction_id: int,
        reservation_id: int = None
    ) -> int:
        start, end = date_range.isoformat()
        cursor = self.db.execute('''
            INSERT INTO room_restrictions
            (start_date, end_date, room_id, restriction_id, reservation_id,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        ''', (start, end, room_id, restriction_id, reservation_id))
        return cursor.lastrowid

    # =========================================================================
    # RESERVATIONS
    # =========================================================================

    @storage_errors
    def insert_reservation(self, reservation: dict) -> int:
        cursor = self.db.execute('''
            INSERT INTO reservations
            (first_name, last_name, email, phone, start_date, end_date,
             room_id, processed, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, 0, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        ''', (
            reservation['first_name'],
            reservation['last_name'],
            reservation['email'],
            reservation.get('phone') or '',
            reservation['start_date'],
            reservation['end_date'],
            reservation['room_id'],
        ))
        return cursor.lastrowid

    @storage_errors
    def get_reservation_by_id(self, reservation_id: int) -> Optional[dict]:
        cursor = self.db.execute('''
            SELECT r.id, r.first_name, r.last_name, r.email, r.phone,
                   r.start_date, r.end_date, r.room_id, r.processed,
                   r.created_at, r.updated_at,
                   rm.room_name
            FROM reservations r
            LEFT JOIN rooms rm ON r.room_id = rm.id
            WHERE r.id = ?
        ''', (reservation_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    @storage_errors
    def all_reservations(self, processed: Optional[bool] = None) -> list:
        query = '''
            SELECT r.id, r.first_name, r.last_name, r.email, r.phone,
                   r.start_date, r.end_date, r.room_id, r.processed,
                   r.created_at, r.updated_at,
                   rm.room_name
            FROM reservations r
            LEFT JOIN rooms rm ON r.room_id = rm.id
        '''
        params = []
        if processed is not None:
            query += ' WHERE r.processed = ?'
            params.append(1 if processed else 0)
        query += ' ORDER BY r.start_date, r.id'

        cursor = self.db.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]

    @storage_errors
    def set_processed(self, reservation_id: int, processed: bool = True) -> bool:
        cursor = self.db.execute('''
            UPDATE reservations
            SET processed = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (1 if processed else 0, reservation_id))
        return cursor.rowcount > 0

    @storage_errors
    def delete_reservation(self, reservation_id: int) -> bool:
        # room_restrictions rows go with it (ON DELETE CASCADE)
        cursor = self.db.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))
        return cursor.rowcount > 0
