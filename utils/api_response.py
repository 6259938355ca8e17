"""
JSON envelope for the /api endpoints.

    Success:  {"success": true, "data": {...}, "message": "..."}
    Error:    {"success": false, "error": "message", "code": "invalid_range"}

Booking core exceptions map to a status code and a user-facing message with
api_booking_error, so routes only catch BookingError.
"""

import logging
from typing import Any

from flask import jsonify

from models.exceptions import (
    BookingError, InvalidDate, InvalidRange, MissingDraft, RoomNoLongerAvailable,
    StorageUnavailable, ValidationFailed
)
from utils.messages import get_message

logger = logging.getLogger(__name__)

# Exception type -> (HTTP status, message key); first match wins
BOOKING_ERROR_STATUS = (
    (InvalidDate, 400, 'invalid_date'),
    (InvalidRange, 400, 'invalid_date_range'),
    (ValidationFailed, 400, 'form_errors'),
    (MissingDraft, 400, 'missing_draft'),
    (RoomNoLongerAvailable, 409, 'room_no_longer_available'),
    (StorageUnavailable, 503, 'storage_unavailable'),
)


def api_success(data: dict | None = None, message: str | None = None, status: int = 200, **extra_fields: Any) -> tuple:
    """
    Build a success response.

    Args:
        data: Payload under 'data'
        message: Optional message
        status: HTTP status code
        **extra_fields: Additional top-level fields

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    response.update(extra_fields)
    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """Build an error response: {'success': False, 'error': error, ...}."""
    response = {'success': False, 'error': error}
    response.update(extra_fields)
    return jsonify(response), status


def api_booking_error(exc: BookingError) -> tuple:
    """
    Error response for a booking core exception.

    Storage failures are logged; the rest are client errors. ValidationFailed
    adds the per-field messages under 'fields'.
    """
    for exc_type, status, key in BOOKING_ERROR_STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        status, key = 500, 'storage_unavailable'

    if status >= 500:
        logger.error(f'API request failed: {exc}')

    extra = {'code': key}
    if isinstance(exc, ValidationFailed):
        extra['fields'] = exc.errors
    return api_error(get_message(key), status=status, **extra)
