"""Mail transports used by the notifier.

A transport takes a fully composed message and delivers it. Transports
raise ``smtplib.SMTPException`` or ``OSError`` on failure.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """Anything that can deliver an EmailMessage."""

    def send(self, message: EmailMessage) -> None: ...


class SmtpTransport:
    """Deliver mail through an SMTP server with a bounded timeout."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        security: str = "starttls",
        timeout: float = 30.0,
    ):
        """Initialize SMTP transport.

        Args:
            host: SMTP server hostname
            port: SMTP server port
            username: Login user, if the server requires authentication
            password: Login password
            security: One of "starttls", "ssl" or "none"
            timeout: Socket timeout in seconds for connect and each command
        """
        if security not in ("starttls", "ssl", "none"):
            raise ValueError(f"Unknown SMTP security mode: {security}")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.security = security
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        if self.security == "ssl":
            context = ssl.create_default_context()
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, message: EmailMessage) -> None:
        logger.debug("Connecting to %s:%s (%s)", self.host, self.port, self.security)
        with self._connect() as server:
            server.ehlo()
            if self.security == "starttls":
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)


class ConsoleTransport:
    """Log messages instead of sending them. For development."""

    def __init__(self):
        self.sent: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)
        logger.info(
            "Mail from %s to %s: %s\n%s",
            message["From"],
            message["To"],
            message["Subject"],
            message.get_content().strip(),
        )
