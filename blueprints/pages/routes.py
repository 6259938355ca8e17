"""
Public pages: home, about, contact and room information.
"""

from flask import Blueprint, abort, render_template

from blueprints.booking.forms import SearchAvailabilityForm
from models.services import get_services

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/')
def home():
    """Landing page."""
    return render_template('pages/home.html')


@pages_bp.route('/about')
def about():
    """About the house."""
    return render_template('pages/about.html')


@pages_bp.route('/contact')
def contact():
    """Contact details."""
    return render_template('pages/contact.html')


@pages_bp.route('/rooms')
def rooms():
    """List all rooms."""
    all_rooms = get_services().repository.all_rooms()
    return render_template('pages/rooms.html', rooms=all_rooms)


@pages_bp.route('/rooms/<int:room_id>')
def room_detail(room_id):
    """
    Room page with a date check.

    The page script posts to /search-availability-json and, when the room is
    free, links to /book-room for the chosen dates.
    """
    room = get_services().repository.get_room_by_id(room_id)
    if room is None:
        abort(404)

    return render_template('pages/room.html', room=room, form=SearchAvailabilityForm())
