"""
Centralized UI messages.
All user-facing text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'reservation_created': 'Reservation confirmed. A confirmation email is on its way.',
    'details_saved': 'Please review your reservation',

    # Notices
    'no_availability': 'No availability',
    'room_no_longer_available': 'Sorry, that room was just booked for those dates. Please choose another room.',
    'missing_draft': 'Please search availability first',
    'missing_reservation': 'No reservation found',

    # Error messages
    'invalid_date': 'Dates must be in YYYY-MM-DD format',
    'invalid_date_range': 'The departure date must be after the arrival date',
    'invalid_email': 'Invalid email address',
    'invalid_phone': 'Invalid phone number',
    'unknown_room': 'Room not found',
    'room_not_offered': 'That room is not available for the selected dates',
    'storage_unavailable': 'We could not complete your request right now, please try again',
    'form_errors': 'Please correct the errors below',

    # Validation messages
    'field_required': 'This field is required',
    'min_length': 'This field must be at least {length} characters long',

    # Mail subjects
    'mail_confirmation_subject': 'Reservation confirmation',
    'mail_owner_subject': 'New reservation',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
