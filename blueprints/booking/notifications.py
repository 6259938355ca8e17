"""
Reservation emails.
Builds the guest confirmation and the owner copy and hands them to the mailer.
"""

from flask import current_app, render_template

from extensions import mailer
from utils.mailer import MailData
from utils.messages import get_message


def send_reservation_notifications(reservation: dict):
    """
    Queue confirmation emails for a new reservation.

    Failures are logged; the booking is already committed.

    Args:
        reservation: Persisted reservation (with room_name)
    """
    try:
        mailer.send(MailData(
            to=reservation['email'],
            subject=get_message('mail_confirmation_subject'),
            content=render_template('email/reservation_confirmation.html', reservation=reservation)
        ))

        owner_address = current_app.config.get('MAIL_OWNER_ADDRESS')
        if owner_address:
            mailer.send(MailData(
                to=owner_address,
                subject=get_message('mail_owner_subject'),
                content=render_template('email/owner_notification.html', reservation=reservation)
            ))
    except Exception as e:
        current_app.logger.error(
            f'Could not queue mail for reservation {reservation.get("id")}: {e}', exc_info=True
        )
