"""Email notification dispatcher."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable

from ..errors import NotificationError
from .transport import ConsoleTransport, MailTransport, SmtpTransport

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Delayed loan"


class EmailNotifier:
    """Send one message to a batch of recipients."""

    def __init__(
        self,
        transport: MailTransport,
        sender: str,
        subject: str = DEFAULT_SUBJECT,
    ):
        """Initialize notifier.

        Args:
            transport: Delivery mechanism
            sender: From address of every notification
            subject: Subject line of every notification
        """
        self.transport = transport
        self.sender = sender
        self.subject = subject

    def compose(self, message: str, recipients: list[str]) -> EmailMessage:
        """Build the outbound message addressed to all recipients."""
        mail = EmailMessage()
        mail["From"] = self.sender
        if recipients:
            mail["To"] = ", ".join(recipients)
        mail["Subject"] = self.subject
        mail.set_content(message)
        return mail

    def notify(self, message: str, recipients: Iterable[str]) -> None:
        """Send ``message`` once, addressed to every recipient.

        An empty recipient list is still handed to the transport; a
        transport that refuses it reports a NotificationError.

        Raises:
            NotificationError: If the transport reports a failure. Not retried.
        """
        recipients = list(recipients)
        mail = self.compose(message, recipients)
        try:
            self.transport.send(mail)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send notification to %d recipients: %s", len(recipients), e)
            raise NotificationError(f"Mail transport failed: {e}") from e

        logger.info("Sent notification to %d recipients", len(recipients))


def notifier_from_config(config) -> EmailNotifier:
    """Build a notifier for the configured mail backend.

    Args:
        config: Application Config
    """
    if config.mail_backend == "console":
        transport = ConsoleTransport()
    else:
        transport = SmtpTransport(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            security=config.smtp_security,
            timeout=config.smtp_timeout,
        )
    return EmailNotifier(transport, sender=config.mail_sender)
