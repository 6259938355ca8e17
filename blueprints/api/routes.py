"""
API routes for JSON endpoints.
Read-only access to rooms and their calendar blocks.
"""

from flask import Blueprint, current_app, jsonify, request

from models.exceptions import BookingError
from models.services import get_services
from utils.api_response import api_booking_error, api_error, api_success
from utils.messages import get_message

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'Bookings')
    })


@api_bp.route('/rooms')
def api_rooms():
    """
    Get all rooms as JSON.

    Returns:
        JSON list of rooms ordered by name
    """
    try:
        rooms = get_services().repository.all_rooms()
    except BookingError as e:
        return api_booking_error(e)

    return api_success(data={'rooms': rooms, 'count': len(rooms)})


@api_bp.route('/rooms/<int:room_id>/restrictions')
def api_room_restrictions(room_id):
    """
    Get the restrictions blocking a room within a date range.

    Query params:
        start: First night (YYYY-MM-DD)
        end: Departure day, exclusive (YYYY-MM-DD)

    Returns:
        JSON with the room, the range, availability and the blocking restrictions
    """
    services = get_services()
    start = request.args.get('start', '')
    end = request.args.get('end', '')

    try:
        room = services.repository.get_room_by_id(room_id)
        if room is None:
            return api_error(get_message('unknown_room'), status=404, code='unknown_room')

        restrictions = services.engine.restrictions_for_room(room_id, (start, end))
    except BookingError as e:
        return api_booking_error(e)

    return api_success(data={
        'room': room,
        'start': start,
        'end': end,
        'available': not restrictions,
        'restrictions': restrictions
    })
