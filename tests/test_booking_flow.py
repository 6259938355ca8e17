"""
Tests for the booking flow state machine.
Uses a plain dict as the session and the in-memory repository.
"""

import pytest

from models.availability import AvailabilityEngine
from models.booking_draft import (
    BookingDraft, COMMITTED, NO_DRAFT, RANGE_CHOSEN, ROOM_CHOSEN, DETAILS_ENTERED
)
from models.booking_flow import BookingFlow, CONFIRMATION_KEY, DRAFT_KEY
from models.date_range import DateRange
from models.exceptions import (
    InvalidDate, InvalidRange, MissingDraft, RoomNoLongerAvailable, ValidationFailed
)
from models.memory_repository import MemoryReservationRepository
from models.reservation_writer import ReservationWriter

GUEST = {'first_name': 'John', 'last_name': 'Sule', 'email': 'sule@email.com'}


def flow_for(repository, session=None, notify=None):
    engine = AvailabilityEngine(repository)
    return BookingFlow(
        {} if session is None else session,
        engine,
        ReservationWriter(repository, engine),
        notify=notify
    )


def block(repository, room_id, start, end):
    with repository.transaction():
        repository.insert_room_restriction(
            room_id=room_id,
            date_range=DateRange.parse(start, end),
            restriction_id=2
        )


class TestEndToEnd:
    """A full booking from search to commit."""

    def test_book_generals_quarters(self):
        repository = MemoryReservationRepository(rooms=["General's quarters"])
        notified = []
        flow = flow_for(repository, notify=notified.append)

        rooms = flow.submit_date_range('2025-01-01', '2025-12-12')
        assert flow.state == RANGE_CHOSEN
        assert [room['room_name'] for room in rooms] == ["General's quarters"]

        flow.choose_room(rooms[0]['id'])
        assert flow.state == ROOM_CHOSEN

        flow.enter_details(GUEST)
        assert flow.state == DETAILS_ENTERED

        reservation = flow.confirm()

        assert flow.state == COMMITTED
        assert reservation['room_id'] == rooms[0]['id']
        assert reservation['processed'] == 0
        assert repository.get_reservation_by_id(reservation['id'])['last_name'] == 'Sule'
        assert notified == [reservation]

        assert flow.pop_confirmation() == reservation
        assert flow.state == NO_DRAFT
        with pytest.raises(MissingDraft):
            flow.pop_confirmation()

    def test_new_search_after_commit(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')
        flow.enter_details(GUEST)
        flow.confirm()
        assert flow.state == COMMITTED

        flow.submit_date_range('2025-07-01', '2025-07-05')
        assert flow.state == RANGE_CHOSEN


class TestSubmitDateRange:
    """Tests for the first step."""

    def test_stores_candidates(self, flow):
        rooms = flow.submit_date_range('2025-06-01', '2025-06-05')
        draft = flow.draft

        assert draft.state == RANGE_CHOSEN
        assert draft.room_ids == [room['id'] for room in rooms]
        assert draft.date_range == DateRange.parse('2025-06-01', '2025-06-05')

    def test_session_holds_plain_data(self, flow):
        flow.submit_date_range('2025-06-01', '2025-06-05')
        stored = flow.session[DRAFT_KEY]
        assert stored['start_date'] == '2025-06-01'
        assert stored['end_date'] == '2025-06-05'
        assert stored['state'] == RANGE_CHOSEN

    def test_no_availability_leaves_no_draft(self, flow, memory_repository):
        block(memory_repository, 1, '2025-06-01', '2025-06-10')
        block(memory_repository, 2, '2025-06-01', '2025-06-10')

        assert flow.submit_date_range('2025-06-02', '2025-06-04') == []
        assert flow.state == NO_DRAFT

    def test_invalid_range(self, flow):
        with pytest.raises(InvalidRange):
            flow.submit_date_range('2025-06-05', '2025-06-01')
        assert flow.state == NO_DRAFT

    def test_invalid_date(self, flow):
        with pytest.raises(InvalidDate):
            flow.submit_date_range('June 1st', '2025-06-05')

    def test_new_search_replaces_draft(self, flow):
        flow.submit_date_range('2025-06-01', '2025-06-05')
        flow.choose_room(1)
        flow.submit_date_range('2025-07-01', '2025-07-05')

        assert flow.state == RANGE_CHOSEN
        assert flow.draft.room_id is None
        assert flow.draft.start_date.month == 7


class TestChooseRoom:
    """Tests for room selection."""

    def test_without_search(self, flow):
        with pytest.raises(MissingDraft):
            flow.choose_room(1)

    def test_room_not_offered(self, flow, memory_repository):
        block(memory_repository, 2, '2025-06-01', '2025-06-10')
        flow.submit_date_range('2025-06-01', '2025-06-05')

        with pytest.raises(ValidationFailed) as excinfo:
            flow.choose_room(2)
        assert excinfo.value.field == 'room_id'
        assert flow.state == RANGE_CHOSEN

    def test_available_rooms_refreshes_candidates(self, flow, memory_repository):
        flow.submit_date_range('2025-06-01', '2025-06-05')
        block(memory_repository, 1, '2025-06-01', '2025-06-10')

        rooms = flow.available_rooms()

        assert [room['id'] for room in rooms] == [2]
        assert flow.draft.room_ids == [2]

    def test_available_rooms_without_search(self, flow):
        with pytest.raises(MissingDraft):
            flow.available_rooms()


class TestBookRoom:
    """Tests for starting from a room page."""

    def test_sets_room_chosen(self, flow):
        draft = flow.book_room(2, '2025-06-01', '2025-06-05')
        assert draft.state == ROOM_CHOSEN
        assert flow.draft.room_id == 2

    def test_unknown_room(self, flow):
        with pytest.raises(ValidationFailed):
            flow.book_room(42, '2025-06-01', '2025-06-05')
        assert flow.state == NO_DRAFT

    def test_invalid_range(self, flow):
        with pytest.raises(InvalidRange):
            flow.book_room(1, '2025-06-05', '2025-06-05')


class TestEnterDetails:
    """Tests for the guest details step."""

    def test_without_room(self, flow):
        flow.submit_date_range('2025-06-01', '2025-06-05')
        with pytest.raises(MissingDraft):
            flow.enter_details(GUEST)

    def test_invalid_details_keep_values(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')

        with pytest.raises(ValidationFailed) as excinfo:
            flow.enter_details(dict(GUEST, first_name='Jo'))

        assert excinfo.value.field == 'first_name'
        assert flow.state == ROOM_CHOSEN
        assert flow.draft.first_name == 'Jo'
        assert flow.draft.email == 'sule@email.com'

    def test_values_are_trimmed(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')
        flow.enter_details(dict(GUEST, first_name='  John '))
        assert flow.draft.first_name == 'John'

    def test_details_can_be_edited(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')
        flow.enter_details(GUEST)
        flow.enter_details(dict(GUEST, phone='555-123-4567'))

        assert flow.state == DETAILS_ENTERED
        assert flow.draft.phone == '555-123-4567'

    def test_ignores_unknown_fields(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')
        flow.enter_details(dict(GUEST, csrf_token='abc', submit=True))
        assert 'csrf_token' not in flow.session[DRAFT_KEY]


class TestConfirm:
    """Tests for committing the draft."""

    def test_without_details(self, flow):
        flow.book_room(1, '2025-06-01', '2025-06-05')
        with pytest.raises(MissingDraft):
            flow.confirm()

    def test_with_empty_session(self, flow):
        with pytest.raises(MissingDraft):
            flow.confirm()

    def test_conflict_returns_to_room_selection(self, memory_repository):
        first = flow_for(memory_repository)
        second = flow_for(memory_repository)

        for flow in (first, second):
            flow.submit_date_range('2025-06-01', '2025-06-05')
            flow.choose_room(1)
            flow.enter_details(GUEST)

        first.confirm()

        with pytest.raises(RoomNoLongerAvailable):
            second.confirm()

        draft = second.draft
        assert draft.state == RANGE_CHOSEN
        assert draft.room_id is None
        assert draft.room_ids == [2]
        assert draft.first_name == 'John'

    def test_notify_not_called_on_conflict(self, memory_repository):
        notified = []
        block(memory_repository, 1, '2025-06-01', '2025-06-10')
        flow = flow_for(memory_repository, notify=notified.append)
        flow.book_room(1, '2025-06-01', '2025-06-05')
        flow.enter_details(GUEST)

        with pytest.raises(RoomNoLongerAvailable):
            flow.confirm()
        assert notified == []
        assert CONFIRMATION_KEY not in flow.session


class TestBookingDraft:
    """Tests for draft session serialization."""

    def test_round_trip(self):
        draft = BookingDraft(
            state=DETAILS_ENTERED,
            start_date=DateRange.parse('2025-06-01', '2025-06-05').start,
            end_date=DateRange.parse('2025-06-01', '2025-06-05').end,
            room_id=1,
            room_ids=[1, 2],
            **GUEST
        )
        restored = BookingDraft.from_session(draft.to_session())

        assert restored.state == DETAILS_ENTERED
        assert restored.date_range == draft.date_range
        assert restored.room_ids == [1, 2]
        assert restored.guest == draft.guest

    def test_missing_dates(self):
        with pytest.raises(MissingDraft):
            BookingDraft(state=RANGE_CHOSEN).date_range
