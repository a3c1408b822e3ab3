"""Provides a unified API for sending account e-mail."""

from email.message import EmailMessage
import smtplib
import logging

from . import templates

logger = logging.getLogger(__name__)


class DeliveryFailed(RuntimeError):
    """A message could not be handed to the mail service."""


class MailSession(object):
    """Sends messages through an SMTP service."""

    def __init__(self, host: str = "", port: int = 0,
                 sender: str = "") -> None:
        self._host = host
        self._port = port
        self._sender = sender

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(
            host=self._host,
            port=self._port
        )

    def send_mail(self, to: str, subject: str, html: str) -> None:
        """
        Send an HTML message.

        Raises
        ------
        :class:`DeliveryFailed`

        """
        message = EmailMessage()
        message['From'] = self._sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(html, subtype='html')
        try:
            with self._new_connection() as conn:
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryFailed(f'Could not send mail to {to}: {e}') from e
        logger.debug('Sent "%s" to %s', subject, to)
