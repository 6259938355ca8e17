"""
Reservation write path.
Validates a booking draft and persists the reservation together with the
room restriction that blocks its dates, as one transaction.
"""

import logging

from utils.messages import get_message
from utils.validators import validate_email, validate_min_length, validate_phone, sanitize_input
from .availability import AvailabilityEngine
from .booking_draft import BookingDraft
from .exceptions import RoomNoLongerAvailable, ValidationFailed
from .repository import ReservationRepository

logger = logging.getLogger(__name__)

FIRST_NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
PHONE_MAX_LENGTH = 30


def validate_guest_details(fields: dict) -> dict:
    """
    Validate guest contact fields.

    Args:
        fields: Mapping with first_name, last_name, email and optional phone

    Returns:
        dict: {field: message} for every failing field (empty when valid)
    """
    errors = {}

    first_name = sanitize_input(fields.get('first_name'))
    if not first_name:
        errors['first_name'] = get_message('field_required')
    elif not validate_min_length(first_name, FIRST_NAME_MIN_LENGTH):
        errors['first_name'] = get_message('min_length', length=FIRST_NAME_MIN_LENGTH)

    if not sanitize_input(fields.get('last_name')):
        errors['last_name'] = get_message('field_required')

    email = sanitize_input(fields.get('email'))
    if not email:
        errors['email'] = get_message('field_required')
    elif not validate_email(email):
        errors['email'] = get_message('invalid_email')

    phone = sanitize_input(fields.get('phone'))
    if phone and not validate_phone(phone):
        errors['phone'] = get_message('invalid_phone')

    return errors


def raise_for_errors(errors: dict):
    """Raise ValidationFailed for the first failing field, carrying all of them."""
    if errors:
        field = next(iter(errors))
        raise ValidationFailed(field, errors[field], errors)


class ReservationWriter:
    """
    Books reservations.

    Args:
        repository: Reservation repository
        engine: Availability engine used for the authoritative re-check
        restriction_id: Restriction recorded for reservation-derived blocks
    """

    def __init__(
        self,
        repository: ReservationRepository,
        engine: AvailabilityEngine = None,
        restriction_id: int = 1
    ):
        self.repository = repository
        self.engine = engine or AvailabilityEngine(repository)
        self.restriction_id = restriction_id

    def book_reservation(self, draft: BookingDraft) -> dict:
        """
        Persist a reservation and its room restriction atomically.

        The availability check made while the guest browsed is only advisory;
        the room is checked again inside the write transaction.

        Args:
            draft: Booking draft with dates, room and guest fields

        Returns:
            dict: The persisted reservation (with id and room_name)

        Raises:
            InvalidRange: If the draft's dates are not a valid range
            ValidationFailed: If guest fields or the room are invalid
            RoomNoLongerAvailable: If another booking took the room first
            StorageUnavailable: If the store fails (nothing is persisted)
        """
        date_range = draft.date_range

        errors = validate_guest_details(draft.guest)
        if draft.room_id is None:
            errors['room_id'] = get_message('field_required')
        raise_for_errors(errors)

        start_date, end_date = date_range.isoformat()
        reservation = {
            'first_name': sanitize_input(draft.first_name, NAME_MAX_LENGTH),
            'last_name': sanitize_input(draft.last_name, NAME_MAX_LENGTH),
            'email': sanitize_input(draft.email, EMAIL_MAX_LENGTH),
            'phone': sanitize_input(draft.phone, PHONE_MAX_LENGTH),
            'start_date': start_date,
            'end_date': end_date,
            'room_id': draft.room_id,
        }

        with self.repository.transaction():
            if self.repository.get_room_by_id(draft.room_id) is None:
                raise ValidationFailed('room_id', get_message('unknown_room'))

            if not self.engine.is_room_available(draft.room_id, date_range):
                logger.info(f'Room {draft.room_id} taken for {date_range}, booking rejected')
                raise RoomNoLongerAvailable(draft.room_id, date_range)

            reservation_id = self.repository.insert_reservation(reservation)
            self.repository.insert_room_restriction(
                room_id=draft.room_id,
                date_range=date_range,
                restriction_id=self.restriction_id,
                reservation_id=reservation_id
            )

        logger.info(f'Reservation {reservation_id} booked: room {draft.room_id} {date_range}')

        return self.repository.get_reservation_by_id(reservation_id)
