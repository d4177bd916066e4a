"""Notification module.

Sends a single email to a batch of recipients through a pluggable
transport (SMTP, or the console for development).
"""

from .notifier import DEFAULT_SUBJECT, EmailNotifier, notifier_from_config
from .transport import ConsoleTransport, MailTransport, SmtpTransport

__all__ = [
    "DEFAULT_SUBJECT",
    "EmailNotifier",
    "notifier_from_config",
    "ConsoleTransport",
    "MailTransport",
    "SmtpTransport",
]
