"""
Tests for outgoing mail.
"""

import smtplib
import pytest
from flask import Flask

from utils.mailer import MailData, Mailer


class FakeSMTP:
    """Records what would have been sent."""

    sent = []
    fail = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.credentials = None

    def __enter__(self):
        if FakeSMTP.fail:
            raise smtplib.SMTPConnectError(421, 'unavailable')
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.credentials = (username, password)

    def send_message(self, msg):
        FakeSMTP.sent.append((self, msg))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.fail = False
    monkeypatch.setattr(smtplib, 'SMTP', FakeSMTP)
    return FakeSMTP


def make_mailer(**settings):
    app = Flask(__name__)
    app.config.update({
        'MAIL_SERVER': 'smtp.bookings.local',
        'MAIL_PORT': 2525,
        'MAIL_DEFAULT_SENDER': 'reservations@bookings.local',
        'MAIL_SUPPRESS_SEND': False,
    })
    app.config.update(settings)
    return Mailer(app)


class TestMailer:
    """Tests for the SMTP mailer."""

    def test_suppressed_messages_recorded(self, fake_smtp):
        mailer = make_mailer(MAIL_SUPPRESS_SEND=True)
        mailer.send(MailData(to='guest@example.com', subject='Hi', content='<p>Hi</p>'))

        assert len(mailer.outbox) == 1
        assert mailer.outbox[0].sender == 'reservations@bookings.local'
        assert fake_smtp.sent == []

    def test_testing_app_suppresses_by_default(self):
        app = Flask(__name__)
        app.config['TESTING'] = True
        assert Mailer(app).suppress is True

    def test_deliver(self, fake_smtp):
        mailer = make_mailer(MAIL_USE_TLS=True, MAIL_USERNAME='user', MAIL_PASSWORD='secret')

        assert mailer.deliver(MailData(
            to='guest@example.com', subject='Reservation confirmation', content='<p>Hi</p>'
        )) is True

        server, msg = fake_smtp.sent[0]
        assert (server.host, server.port) == ('smtp.bookings.local', 2525)
        assert server.started_tls is True
        assert server.credentials == ('user', 'secret')
        assert msg['To'] == 'guest@example.com'
        assert msg['From'] == 'reservations@bookings.local'
        assert msg['Subject'] == 'Reservation confirmation'
        assert msg.get_content_subtype() == 'html'

    def test_deliver_failure_returns_false(self, fake_smtp):
        fake_smtp.fail = True
        mailer = make_mailer()
        assert mailer.deliver(MailData(to='guest@example.com', subject='Hi', content='Hi')) is False

    def test_send_uses_background_worker(self, fake_smtp):
        mailer = make_mailer()
        mailer.send(MailData(to='a@example.com', subject='One', content='1'))
        mailer.send(MailData(to='b@example.com', subject='Two', content='2'))
        mailer.join()

        assert [msg['To'] for _, msg in fake_smtp.sent] == ['a@example.com', 'b@example.com']
        assert mailer.outbox == []

    def test_worker_survives_failure(self, fake_smtp):
        mailer = make_mailer()
        fake_smtp.fail = True
        mailer.send(MailData(to='a@example.com', subject='One', content='1'))
        mailer.join()

        fake_smtp.fail = False
        mailer.send(MailData(to='b@example.com', subject='Two', content='2'))
        mailer.join()

        assert [msg['To'] for _, msg in fake_smtp.sent] == ['b@example.com']
