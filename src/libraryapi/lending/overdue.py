"""Overdue loan detection."""

from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy import select

from ..db.sqlite import Database, get_db
from .models import Loan

DEFAULT_GRACE_DAYS = 4


class OverdueScanner:
    """Read-only query selecting active loans older than the grace period.

    A loan issued exactly ``grace_days`` days ago is not yet overdue; one
    issued ``grace_days + 1`` days ago is. Returned loans never are.
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        grace_days: int = DEFAULT_GRACE_DAYS,
        today: Callable[[], date] = date.today,
    ):
        if grace_days < 0:
            raise ValueError(f"grace_days cannot be negative: {grace_days}")
        self.db = db or get_db()
        self.grace_days = grace_days
        self.today = today

    def cutoff(self) -> date:
        """Loans issued strictly before this date are overdue."""
        return self.today() - timedelta(days=self.grace_days)

    def scan(self) -> list[Loan]:
        """Return every overdue loan at call time, oldest first."""
        cutoff = self.cutoff().isoformat()
        with self.db.get_session() as session:
            stmt = (
                select(Loan)
                .where(
                    Loan.returned.is_not(True),
                    Loan.loan_date < cutoff,
                )
                .order_by(Loan.loan_date, Loan.id)
            )
            loans = list(session.execute(stmt).scalars().all())
            for loan in loans:
                session.expunge(loan)
            return loans
