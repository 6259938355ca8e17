"""
Booking flow controller.

Drives one session's booking through explicit states:

    no_draft -> range_chosen -> room_chosen -> details_entered -> committed

The session is any mutable mapping (Flask's session in the web app, a dict in
tests). The draft lives under DRAFT_KEY; a confirmed reservation is parked
under CONFIRMATION_KEY until the summary view pops it.
"""

import logging
from typing import Callable, MutableMapping, Optional

from utils.messages import get_message
from .availability import AvailabilityEngine
from .booking_draft import (
    BookingDraft, NO_DRAFT, RANGE_CHOSEN, ROOM_CHOSEN, DETAILS_ENTERED, COMMITTED
)
from .date_range import DateRange
from .exceptions import MissingDraft, RoomNoLongerAvailable, ValidationFailed
from .reservation_writer import ReservationWriter, raise_for_errors, validate_guest_details

logger = logging.getLogger(__name__)

DRAFT_KEY = 'booking_draft'
CONFIRMATION_KEY = 'confirmed_reservation'


class BookingFlow:
    """
    Session-scoped booking state machine.

    Args:
        session: Per-request session mapping
        engine: Availability engine
        writer: Reservation writer
        notify: Called with the confirmed reservation after commit
    """

    def __init__(
        self,
        session: MutableMapping,
        engine: AvailabilityEngine,
        writer: ReservationWriter,
        notify: Callable[[dict], None] = None
    ):
        self.session = session
        self.engine = engine
        self.writer = writer
        self.notify = notify

    # =========================================================================
    # DRAFT ACCESS
    # =========================================================================

    @property
    def draft(self) -> Optional[BookingDraft]:
        data = self.session.get(DRAFT_KEY)
        return BookingDraft.from_session(data) if data else None

    @property
    def state(self) -> str:
        """Draft state; committed while a confirmation awaits the summary view."""
        draft = self.draft
        if draft is not None:
            return draft.state
        if self.session.get(CONFIRMATION_KEY) is not None:
            return COMMITTED
        return NO_DRAFT

    def _save(self, draft: BookingDraft):
        # Reassign the whole value so the session notices the change
        self.session[DRAFT_KEY] = draft.to_session()

    def _discard(self):
        self.session.pop(DRAFT_KEY, None)

    def _require(self, *states) -> BookingDraft:
        draft = self.draft
        if draft is None or draft.state not in states:
            current = draft.state if draft else NO_DRAFT
            raise MissingDraft(f'booking step needs one of {states}, draft is {current}')
        return draft

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def submit_date_range(self, start, end) -> list:
        """
        Start a booking from a date range.

        Args:
            start: Arrival date (YYYY-MM-DD)
            end: Departure date (YYYY-MM-DD)

        Returns:
            list: Free rooms ordered by name; empty means no availability and
                leaves the flow in no_draft

        Raises:
            InvalidDate: If a date does not parse
            InvalidRange: If arrival is not before departure
        """
        self._discard()
        date_range = DateRange.parse(start, end)

        rooms = self.engine.search_all_rooms(date_range)
        if not rooms:
            logger.debug(f'No availability for {date_range}')
            return []

        self._save(BookingDraft(
            state=RANGE_CHOSEN,
            start_date=date_range.start,
            end_date=date_range.end,
            room_ids=[room['id'] for room in rooms]
        ))
        return rooms

    def available_rooms(self) -> list:
        """
        Re-query the free rooms for the draft's range and offer those.

        Raises:
            MissingDraft: If no range was chosen in this session
        """
        draft = self._require(RANGE_CHOSEN, ROOM_CHOSEN, DETAILS_ENTERED)
        rooms = self.engine.search_all_rooms(draft.date_range)
        draft.room_ids = [room['id'] for room in rooms]
        self._save(draft)
        return rooms

    def choose_room(self, room_id: int) -> BookingDraft:
        """
        Pick one of the rooms offered for the draft's range.

        Raises:
            MissingDraft: If no range was chosen in this session
            ValidationFailed: If the room was not offered for the range
        """
        draft = self._require(RANGE_CHOSEN, ROOM_CHOSEN, DETAILS_ENTERED)

        if room_id not in draft.room_ids:
            raise ValidationFailed('room_id', get_message('room_not_offered'))

        draft.room_id = room_id
        draft.state = ROOM_CHOSEN
        self._save(draft)
        return draft

    def book_room(self, room_id: int, start, end) -> BookingDraft:
        """
        Start a booking for a known room and range (room page shortcut).

        Raises:
            InvalidDate / InvalidRange: On bad dates
            ValidationFailed: If the room does not exist
        """
        date_range = DateRange.parse(start, end)
        if self.engine.repository.get_room_by_id(room_id) is None:
            raise ValidationFailed('room_id', get_message('unknown_room'))

        draft = BookingDraft(
            state=ROOM_CHOSEN,
            start_date=date_range.start,
            end_date=date_range.end,
            room_id=room_id,
            room_ids=[room_id]
        )
        self._save(draft)
        return draft

    def enter_details(self, fields: dict) -> BookingDraft:
        """
        Record guest details.

        The entered values are kept in the draft even when they fail
        validation, so the form can be shown again with them.

        Raises:
            MissingDraft: If no room was chosen
            ValidationFailed: With every field error; state stays room_chosen
        """
        draft = self._require(ROOM_CHOSEN, DETAILS_ENTERED)
        draft.update_guest(fields)

        errors = validate_guest_details(draft.guest)
        draft.state = ROOM_CHOSEN if errors else DETAILS_ENTERED
        self._save(draft)

        raise_for_errors(errors)
        return draft

    def confirm(self) -> dict:
        """
        Commit the draft as a reservation.

        Returns:
            dict: The persisted reservation

        Raises:
            MissingDraft: If details were not entered
            RoomNoLongerAvailable: The draft goes back to range_chosen with a
                fresh candidate list
            StorageUnavailable: The draft is left untouched for a retry
        """
        draft = self._require(DETAILS_ENTERED)

        try:
            reservation = self.writer.book_reservation(draft)
        except RoomNoLongerAvailable:
            rooms = self.engine.search_all_rooms(draft.date_range)
            draft.state = RANGE_CHOSEN
            draft.room_id = None
            draft.room_ids = [room['id'] for room in rooms]
            self._save(draft)
            raise

        self._discard()
        self.session[CONFIRMATION_KEY] = reservation

        if self.notify is not None:
            self.notify(reservation)

        logger.debug(f'Draft committed as reservation {reservation["id"]}')
        return reservation

    def pop_confirmation(self) -> dict:
        """
        Take the confirmed reservation for the summary view.

        Raises:
            MissingDraft: If nothing was confirmed in this session
        """
        reservation = self.session.pop(CONFIRMATION_KEY, None)
        if reservation is None:
            raise MissingDraft('no confirmed reservation in session')
        return reservation
