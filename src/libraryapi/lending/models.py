"""SQLAlchemy models for book lending.

Tables:
- loans: Individual loan records, active and historical
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, utc_now


class Loan(Base):
    """Loan model - one issuance of a book to a customer.

    The book is referenced by id only. Deleting the book clears the
    reference but keeps the loan as history.
    """

    __tablename__ = "loans"
    __table_args__ = (
        # At most one active loan per book
        Index(
            "ux_loans_active_book",
            "book_id",
            unique=True,
            sqlite_where=text("returned IS NULL OR returned = 0"),
            postgresql_where=text("returned IS NOT TRUE"),
        ),
        Index("ix_loans_returned_loan_date", "returned", "loan_date"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ISBN of the book at the time of the loan
    isbn: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Borrower
    customer: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(200))

    book_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    loan_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date

    # NULL or False while active, True once returned
    returned: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return (
            f"<Loan(id={self.id}, isbn='{self.isbn}', customer='{self.customer}', "
            f"returned={self.returned})>"
        )

    @property
    def is_active(self) -> bool:
        """Check if the book is still out."""
        return self.returned is not True

    @property
    def loaned_on(self) -> date:
        """Loan date as a date object."""
        return date.fromisoformat(self.loan_date)

    def days_on_loan(self, today: Optional[date] = None) -> int:
        """Days elapsed since the loan was issued."""
        return ((today or date.today()) - self.loaned_on).days
