"""
Booking routes.
Search availability, choose a room, enter guest details, confirm.

Each request builds a BookingFlow over the user's session; the flow keeps the
draft reservation between steps.
"""

from flask import (
    Blueprint, current_app, flash, jsonify, redirect, render_template, request, session, url_for
)

from blueprints.booking.forms import ReservationForm, SearchAvailabilityForm
from blueprints.booking.notifications import send_reservation_notifications
from models.booking_draft import DETAILS_ENTERED
from models.booking_flow import BookingFlow
from models.date_range import DateRange
from models.exceptions import (
    InvalidDate, InvalidRange, MissingDraft, RoomNoLongerAvailable, StorageUnavailable,
    ValidationFailed
)
from models.services import get_services
from utils.messages import get_message

booking_bp = Blueprint('booking', __name__)


def get_flow() -> BookingFlow:
    """Booking flow bound to the current session."""
    services = get_services()
    return BookingFlow(
        session,
        services.engine,
        services.writer,
        notify=send_reservation_notifications
    )


@booking_bp.errorhandler(MissingDraft)
def missing_draft(error):
    """A step was reached without the previous ones (e.g. direct navigation)."""
    current_app.logger.info(f'Booking flow out of sequence: {error}')
    flash(get_message('missing_draft'), 'warning')
    return redirect(url_for('booking.search_availability'))


# =============================================================================
# SEARCH
# =============================================================================

@booking_bp.route('/search-availability', methods=['GET', 'POST'])
def search_availability():
    """
    Search free rooms for a date range.

    GET: Display the search form
    POST: Search, then continue to room selection
    """
    form = SearchAvailabilityForm()

    if request.method == 'POST':
        if not form.validate_on_submit():
            flash(get_message('form_errors'), 'error')
            return render_template('booking/search_availability.html', form=form)

        try:
            rooms = get_flow().submit_date_range(form.start.data, form.end.data)
        except InvalidDate:
            flash(get_message('invalid_date'), 'error')
            return render_template('booking/search_availability.html', form=form)
        except InvalidRange:
            flash(get_message('invalid_date_range'), 'error')
            return render_template('booking/search_availability.html', form=form)

        if not rooms:
            flash(get_message('no_availability'), 'error')
            return redirect(url_for('booking.search_availability'))

        return redirect(url_for('booking.choose_room_list'))

    return render_template('booking/search_availability.html', form=form)


@booking_bp.route('/search-availability-json', methods=['POST'])
def search_availability_json():
    """
    Check one room for a date range (used by the room page script).

    Form fields:
        start, end: YYYY-MM-DD
        room_id: Room ID

    Returns:
        JSON {ok, start, end, room_id, error}. ok is true only when the room
        is free. error is null for a genuine answer and a message when the
        request could not be answered (400 bad input, 404 unknown room,
        503 storage failure).
    """
    start = request.form.get('start', '')
    end = request.form.get('end', '')
    room_id = request.form.get('room_id', type=int)

    response = {'ok': False, 'start': start, 'end': end, 'room_id': room_id, 'error': None}

    if room_id is None:
        response['error'] = get_message('unknown_room')
        return jsonify(response), 400

    services = get_services()
    try:
        date_range = DateRange.parse(start, end)
        if services.repository.get_room_by_id(room_id) is None:
            response['error'] = get_message('unknown_room')
            return jsonify(response), 404
        response['ok'] = services.engine.is_room_available(room_id, date_range)
    except InvalidDate:
        response['error'] = get_message('invalid_date')
        return jsonify(response), 400
    except InvalidRange:
        response['error'] = get_message('invalid_date_range')
        return jsonify(response), 400
    except StorageUnavailable as e:
        current_app.logger.error(f'Availability check failed for room {room_id}: {e}')
        response['error'] = get_message('storage_unavailable')
        return jsonify(response), 503

    return jsonify(response)


# =============================================================================
# ROOM SELECTION
# =============================================================================

@booking_bp.route('/choose-room')
def choose_room_list():
    """Display the rooms free for the searched range."""
    flow = get_flow()
    rooms = flow.available_rooms()
    draft = flow.draft

    if not rooms:
        flash(get_message('no_availability'), 'error')
        return redirect(url_for('booking.search_availability'))

    return render_template('booking/choose_room.html', rooms=rooms, draft=draft)


@booking_bp.route('/choose-room/<int:room_id>')
def choose_room(room_id):
    """Pick a room from the search results."""
    try:
        get_flow().choose_room(room_id)
    except ValidationFailed as e:
        flash(e.reason, 'error')
        return redirect(url_for('booking.choose_room_list'))

    return redirect(url_for('booking.make_reservation'))


@booking_bp.route('/book-room')
def book_room():
    """
    Start a booking for one room from its page.

    Query params:
        id: Room ID
        s: Arrival (YYYY-MM-DD)
        e: Departure (YYYY-MM-DD)
    """
    room_id = request.args.get('id', type=int)
    try:
        if room_id is None:
            raise ValidationFailed('room_id', get_message('unknown_room'))
        get_flow().book_room(room_id, request.args.get('s'), request.args.get('e'))
    except (InvalidDate, InvalidRange):
        flash(get_message('invalid_date_range'), 'error')
        return redirect(url_for('booking.search_availability'))
    except ValidationFailed as e:
        flash(e.reason, 'error')
        return redirect(url_for('pages.rooms'))

    return redirect(url_for('booking.make_reservation'))


# =============================================================================
# GUEST DETAILS & CONFIRMATION
# =============================================================================

@booking_bp.route('/make-reservation', methods=['GET', 'POST'])
def make_reservation():
    """
    Guest details for the chosen room.

    GET: Display the form (pre-filled from the draft)
    POST: Store the details, then continue to confirmation
    """
    flow = get_flow()
    draft = flow.draft
    if draft is None or draft.room_id is None:
        raise MissingDraft('no room chosen')

    room = get_services().repository.get_room_by_id(draft.room_id)

    if request.method == 'POST':
        form = ReservationForm()
        if not form.validate_on_submit():
            flash(get_message('form_errors'), 'error')
            return render_template('booking/make_reservation.html', form=form, draft=draft, room=room)

        try:
            flow.enter_details(form.data)
        except ValidationFailed as e:
            form.apply_errors(e.errors)
            flash(get_message('form_errors'), 'error')
            return render_template('booking/make_reservation.html', form=form, draft=flow.draft, room=room)

        flash(get_message('details_saved'), 'info')
        return redirect(url_for('booking.confirm_reservation'))

    form = ReservationForm(data=draft.guest)
    return render_template('booking/make_reservation.html', form=form, draft=draft, room=room)


@booking_bp.route('/confirm-reservation', methods=['GET', 'POST'])
def confirm_reservation():
    """
    Review and commit the reservation.

    GET: Display the summary of the draft
    POST: Book it
    """
    flow = get_flow()

    if request.method == 'POST':
        try:
            reservation = flow.confirm()
        except RoomNoLongerAvailable as e:
            current_app.logger.info(f'Booking conflict: {e}')
            flash(get_message('room_no_longer_available'), 'error')
            return redirect(url_for('booking.choose_room_list'))
        except ValidationFailed as e:
            flash(e.reason, 'error')
            return redirect(url_for('booking.make_reservation'))

        current_app.logger.info(f'Reservation {reservation["id"]} confirmed')
        flash(get_message('reservation_created'), 'success')
        return redirect(url_for('booking.reservation_summary'))

    draft = flow.draft
    if draft is None or flow.state != DETAILS_ENTERED:
        raise MissingDraft('details not entered')

    room = get_services().repository.get_room_by_id(draft.room_id)
    return render_template('booking/confirm_reservation.html', draft=draft, room=room)


@booking_bp.route('/reservation-summary')
def reservation_summary():
    """Display the confirmed reservation once."""
    try:
        reservation = get_flow().pop_confirmation()
    except MissingDraft:
        flash(get_message('missing_reservation'), 'error')
        return redirect(url_for('pages.home'))

    return render_template('booking/reservation_summary.html', reservation=reservation)
