"""Lending manager for book loan operations."""

import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from ..catalog.manager import CatalogManager
from ..db.models import Book, utc_now
from ..db.schemas import Page, PageRequest
from ..db.sqlite import Database, get_db
from ..errors import (
    BookAlreadyLoanedError,
    BookNotFoundError,
    InvalidArgumentError,
    LoanNotFoundError,
)
from .models import Loan
from .overdue import DEFAULT_GRACE_DAYS, OverdueScanner
from .schemas import LoanCreate, LoanFilter

logger = logging.getLogger(__name__)


class LendingManager:
    """Manages the loan ledger.

    Guarantees that a book has at most one active loan. The check and the
    insert run in one transaction, and the partial unique index on
    ``loans.book_id`` rejects whichever concurrent issuance commits second.
    """

    def __init__(
        self,
        db: Optional[Database] = None,
        catalog: Optional[CatalogManager] = None,
        grace_days: int = DEFAULT_GRACE_DAYS,
        today: Callable[[], date] = date.today,
    ):
        """Initialize lending manager.

        Args:
            db: Database instance
            catalog: Catalog used to resolve books by ISBN
            grace_days: Days after issuance before an active loan is overdue
            today: Clock returning the current date
        """
        self.db = db or get_db()
        self.catalog = catalog or CatalogManager(self.db)
        self.today = today
        self.scanner = OverdueScanner(self.db, grace_days=grace_days, today=today)

    # -------------------------------------------------------------------------
    # Issuing and Returning
    # -------------------------------------------------------------------------

    def issue_loan(self, data: LoanCreate) -> Loan:
        """Issue a loan for a book that has no active loan.

        Args:
            data: Loan creation data with the resolved book id

        Returns:
            Created loan

        Raises:
            BookNotFoundError: If the book no longer exists
            InvalidArgumentError: If the ISBN does not belong to the book
            BookAlreadyLoanedError: If the book has an active loan
        """
        with self.db.get_session() as session:
            book = session.get(Book, data.book_id)
            if not book:
                raise BookNotFoundError(f"Book not found: {data.book_id}")
            if book.isbn != data.isbn:
                raise InvalidArgumentError(
                    f"ISBN {data.isbn} does not belong to book {data.book_id}"
                )

            # Check if book is already on loan
            existing_active = session.execute(
                select(Loan.id).where(
                    Loan.book_id == book.id,
                    Loan.returned.is_not(True),
                )
            ).first()
            if existing_active:
                logger.info("Rejected loan of book %s: already loaned", book.id)
                raise BookAlreadyLoanedError()

            loan = Loan(
                isbn=book.isbn,
                customer=data.customer,
                customer_email=data.customer_email,
                book_id=book.id,
                loan_date=self.today().isoformat(),
            )
            book_id = book.id
            session.add(loan)
            try:
                session.flush()
            except IntegrityError as e:
                # The failed flush expires loaded instances
                logger.info("Rejected loan of book %s: concurrent issuance", book_id)
                raise BookAlreadyLoanedError() from e

            session.commit()
            session.refresh(loan)
            session.expunge(loan)

        logger.info("Issued loan %s of ISBN %s to %s", loan.id, loan.isbn, loan.customer)
        return loan

    def issue_loan_for_isbn(self, isbn: str, customer: str, customer_email: str) -> Loan:
        """Resolve a book by ISBN and issue a loan for it.

        Raises:
            BookNotFoundError: If no book has this ISBN
            BookAlreadyLoanedError: If the book has an active loan
        """
        try:
            book = self.catalog.get_book_by_isbn(isbn)
        except BookNotFoundError as e:
            raise BookNotFoundError("Book not found for this ISBN") from e

        return self.issue_loan(
            LoanCreate(
                book_id=book.id,
                isbn=book.isbn,
                customer=customer,
                customer_email=customer_email,
            )
        )

    def get_loan(self, loan_id: int) -> Loan:
        """Get a loan by ID.

        Raises:
            LoanNotFoundError: If no loan has this id
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if not loan:
                raise LoanNotFoundError(f"Loan not found: {loan_id}")
            session.expunge(loan)
            return loan

    def mark_returned(self, loan_id: Optional[int]) -> Loan:
        """Mark a loan as returned.

        Returning only relaxes the single-active-loan rule, so nothing is
        re-validated. Returning an already returned loan is a no-op.

        Args:
            loan_id: Loan ID (required)

        Returns:
            Updated loan
        """
        if loan_id is None:
            raise InvalidArgumentError("Loan Id cant be null.")

        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if not loan:
                raise LoanNotFoundError(f"Loan not found: {loan_id}")

            if loan.returned is not True:
                loan.returned = True
                loan.updated_at = utc_now()
                logger.info("Loan %s returned", loan.id)

            session.commit()
            session.refresh(loan)
            session.expunge(loan)
            return loan

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _paginate(self, conditions: list, page: PageRequest) -> Page[Loan]:
        with self.db.get_session() as session:
            total = session.execute(
                select(func.count()).select_from(Loan).where(*conditions)
            ).scalar() or 0

            stmt = (
                select(Loan)
                .where(*conditions)
                .order_by(Loan.id)
                .offset(page.offset)
                .limit(page.size)
            )
            loans = list(session.execute(stmt).scalars().all())
            for loan in loans:
                session.expunge(loan)

        return Page(items=loans, total=total, page=page.page, size=page.size)

    def find_loans(self, filters: LoanFilter, page: PageRequest) -> Page[Loan]:
        """Find loans by ISBN or customer.

        Args:
            filters: Loan filter (fields are OR-ed)
            page: Page to return

        Returns:
            Page of loans with the total match count
        """
        matches = []
        if filters.isbn:
            matches.append(Loan.isbn == filters.isbn)
        if filters.customer:
            matches.append(Loan.customer == filters.customer)

        conditions = [or_(*matches)] if matches else []
        return self._paginate(conditions, page)

    def list_loans_for_book(self, book_id: int, page: PageRequest) -> Page[Loan]:
        """Get loan history (active and returned) for a book."""
        return self._paginate([Loan.book_id == book_id], page)

    def get_overdue_loans(self) -> list[Loan]:
        """Get all active loans past the grace period."""
        return self.scanner.scan()

    def get_book_for_loan(self, loan: Loan) -> Optional[Book]:
        """Resolve the book a loan refers to, or None if it was deleted."""
        if loan.book_id is None:
            return None
        try:
            return self.catalog.get_book(loan.book_id)
        except BookNotFoundError:
            return None
