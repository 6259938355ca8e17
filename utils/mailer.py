"""
Outgoing mail.

Messages are queued and delivered over SMTP by a background worker thread,
so a request never waits on the mail server. Delivery failures are logged
and never reach the caller.

Usage:
    from extensions import mailer

    mailer.send(MailData(to='guest@example.com', subject='Hi', content='<p>Hi</p>'))
"""

import logging
import queue
import smtplib
import threading
from dataclasses import dataclass
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


@dataclass
class MailData:
    """A single email message."""

    to: str
    subject: str
    content: str
    sender: str = None


class Mailer:
    """
    Queue-backed SMTP sender, initialized like a Flask extension.

    Config keys:
        MAIL_SERVER, MAIL_PORT, MAIL_USERNAME, MAIL_PASSWORD, MAIL_USE_TLS,
        MAIL_TIMEOUT, MAIL_DEFAULT_SENDER, MAIL_SUPPRESS_SEND
    """

    def __init__(self, app=None):
        self.server = 'localhost'
        self.port = 1025
        self.username = None
        self.password = None
        self.use_tls = False
        self.timeout = 10
        self.default_sender = 'no-reply@localhost'
        self.suppress = False
        self.outbox = []
        self._queue = queue.Queue()
        self._worker = None
        self._worker_lock = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Read mail settings from the app config."""
        self.server = app.config.get('MAIL_SERVER', self.server)
        self.port = app.config.get('MAIL_PORT', self.port)
        self.username = app.config.get('MAIL_USERNAME')
        self.password = app.config.get('MAIL_PASSWORD')
        self.use_tls = app.config.get('MAIL_USE_TLS', False)
        self.timeout = app.config.get('MAIL_TIMEOUT', self.timeout)
        self.default_sender = app.config.get('MAIL_DEFAULT_SENDER', self.default_sender)
        self.suppress = app.config.get('MAIL_SUPPRESS_SEND', app.testing)
        self.outbox = []
        app.extensions['mailer'] = self

    def send(self, message: MailData):
        """
        Queue a message for delivery.

        With MAIL_SUPPRESS_SEND the message is only recorded in outbox.
        """
        if not message.sender:
            message.sender = self.default_sender

        if self.suppress:
            self.outbox.append(message)
            logger.info(f'Mail suppressed: to={message.to} subject={message.subject!r}')
            return

        self._ensure_worker()
        self._queue.put(message)

    def _ensure_worker(self):
        with self._worker_lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._run, name='mailer', daemon=True
                )
                self._worker.start()

    def _run(self):
        while True:
            message = self._queue.get()
            try:
                self.deliver(message)
            finally:
                self._queue.task_done()

    def deliver(self, message: MailData) -> bool:
        """
        Send one message over SMTP now.

        Returns:
            bool: True if the server accepted the message
        """
        msg = MIMEText(message.content, 'html')
        msg['Subject'] = message.subject
        msg['From'] = message.sender or self.default_sender
        msg['To'] = message.to

        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f'Mail to {message.to} failed: {e}')
            return False

        logger.info(f'Mail sent to {message.to}: {message.subject!r}')
        return True

    def join(self):
        """Block until queued messages are handled (tests, shutdown)."""
        self._queue.join()
