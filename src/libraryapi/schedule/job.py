"""Overdue notification job.

One run scans the ledger for overdue loans and emails every borrower in a
single dispatch.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol

from ..errors import NotificationError
from ..lending.manager import LendingManager

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, recipients: list[str]) -> None: ...


@dataclass
class JobRun:
    """Result of one job run."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    overdue_count: int = 0
    recipients: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class OverdueNotificationJob:
    """Notify customers whose loans are overdue."""

    def __init__(self, lending: LendingManager, notifier: Notifier, message: str):
        self.lending = lending
        self.notifier = notifier
        self.message = message

    def run(self) -> JobRun:
        """Scan for overdue loans and dispatch one notification.

        The notifier is called exactly once per run, even when nothing is
        overdue. Addresses are not deduplicated. A notification failure is
        recorded on the returned JobRun instead of raised.
        """
        run = JobRun(started_at=datetime.now(timezone.utc))

        overdue = self.lending.get_overdue_loans()
        run.overdue_count = len(overdue)
        run.recipients = [loan.customer_email for loan in overdue if loan.customer_email]
        logger.info("Found %d overdue loans", run.overdue_count)

        try:
            self.notifier.notify(self.message, run.recipients)
        except NotificationError as e:
            run.error = str(e)
            logger.warning("Overdue notification failed: %s", e)
        except Exception as e:
            run.error = f"{type(e).__name__}: {e}"
            logger.exception("Overdue notification failed unexpectedly")

        run.finished_at = datetime.now(timezone.utc)
        return run
