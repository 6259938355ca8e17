"""
Input validation helper functions.
Provides validation for common input types.
"""

import re


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_phone(phone: str) -> bool:
    """
    Validate a loosely formatted international phone number.
    Accepts an optional leading +, then 7 to 15 digits once spaces,
    dashes, dots and parentheses are removed.

    Args:
        phone: Phone number to validate

    Returns:
        True if valid phone format
    """
    if not phone:
        return False

    # Remove spaces and common separators
    cleaned = re.sub(r'[\s\-\.\(\)]', '', phone)

    return bool(re.match(r'^\+?[0-9]{7,15}$', cleaned))


def validate_min_length(value: str, min_length: int) -> bool:
    """
    Validate that a trimmed value has at least min_length characters.

    Args:
        value: Text to check
        min_length: Minimum number of characters

    Returns:
        True if long enough
    """
    if not value:
        return False
    return len(value.strip()) >= min_length


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = str(text).strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
