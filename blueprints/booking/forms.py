"""
Booking forms using Flask-WTF.
Field declarations and CSRF for the search and guest detail pages.
Field rules are enforced by the booking flow so every entry point shares them.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, EmailField, TelField


class SearchAvailabilityForm(FlaskForm):
    """Arrival and departure dates."""

    start = StringField('Arrival', render_kw={'type': 'date', 'required': True})

    end = StringField('Departure', render_kw={'type': 'date', 'required': True})


class ReservationForm(FlaskForm):
    """Guest contact details."""

    first_name = StringField('First name', render_kw={'required': True, 'minlength': 3})

    last_name = StringField('Last name', render_kw={'required': True})

    email = EmailField('Email', render_kw={'required': True})

    phone = TelField('Phone')

    def apply_errors(self, errors: dict):
        """Attach field messages produced by the booking flow."""
        for field_name, message in errors.items():
            field = getattr(self, field_name, None)
            if field is not None:
                field.errors = [message]
