"""Catalog manager for book records."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..db.models import Book, utc_now
from ..db.schemas import BookCreate, BookFilter, BookUpdate, Page, PageRequest
from ..db.sqlite import Database, get_db
from ..errors import BookNotFoundError, DuplicateIsbnError, InvalidArgumentError


class CatalogManager:
    """Manages the book catalog. Owns book identity and ISBN uniqueness."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize catalog manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def add_book(self, data: BookCreate) -> Book:
        """Add a new book to the catalog.

        Args:
            data: Book creation data

        Returns:
            Stored book with its assigned id

        Raises:
            InvalidArgumentError: If the ISBN is empty
            DuplicateIsbnError: If a book with the same ISBN exists
        """
        if not data.isbn:
            raise InvalidArgumentError("Book ISBN cant be empty.")

        with self.db.get_session() as session:
            exists = session.execute(
                select(Book.id).where(Book.isbn == data.isbn)
            ).first()
            if exists:
                raise DuplicateIsbnError(data.isbn)

            book = Book(isbn=data.isbn, title=data.title, author=data.author)
            session.add(book)
            try:
                session.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent insert of the same ISBN
                raise DuplicateIsbnError(data.isbn) from e

            session.commit()
            session.refresh(book)
            session.expunge(book)
            return book

    def get_book(self, book_id: int) -> Book:
        """Get a book by ID.

        Raises:
            BookNotFoundError: If no book has this id
        """
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                raise BookNotFoundError(f"Book not found: {book_id}")
            session.expunge(book)
            return book

    def get_book_by_isbn(self, isbn: str) -> Book:
        """Get a book by ISBN.

        Raises:
            BookNotFoundError: If no book has this ISBN
        """
        with self.db.get_session() as session:
            stmt = select(Book).where(Book.isbn == isbn)
            book = session.execute(stmt).scalar_one_or_none()
            if not book:
                raise BookNotFoundError(f"Book not found for ISBN: {isbn}")
            session.expunge(book)
            return book

    def update_book(self, book_id: Optional[int], data: BookUpdate) -> Book:
        """Overwrite the mutable fields of a book.

        Args:
            book_id: Book ID (required)
            data: Fields to change; unset fields are left alone

        Returns:
            Updated book
        """
        if book_id is None:
            raise InvalidArgumentError("Book Id cant be null.")

        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                raise BookNotFoundError(f"Book not found: {book_id}")

            for field, value in data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(book, field, value)

            book.updated_at = utc_now()
            session.commit()
            session.refresh(book)
            session.expunge(book)
            return book

    def delete_book(self, book_id: Optional[int]) -> None:
        """Remove a book from the catalog.

        Loans that referenced the book keep their history; their book
        reference is cleared by the database.
        """
        if book_id is None:
            raise InvalidArgumentError("Book Id cant be null.")

        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                raise BookNotFoundError(f"Book not found: {book_id}")
            session.delete(book)

    def find_books(self, filters: BookFilter, page: PageRequest) -> Page[Book]:
        """Search the catalog.

        Each set filter field is a case-insensitive substring match; all
        set fields must match. Results are in insertion order.

        Args:
            filters: Search filter
            page: Page to return

        Returns:
            Page of books with the total match count
        """
        conditions = []
        for column, value in (
            (Book.isbn, filters.isbn),
            (Book.title, filters.title),
            (Book.author, filters.author),
        ):
            if value:
                conditions.append(column.icontains(value, autoescape=True))

        with self.db.get_session() as session:
            total = session.execute(
                select(func.count()).select_from(Book).where(*conditions)
            ).scalar() or 0

            stmt = (
                select(Book)
                .where(*conditions)
                .order_by(Book.id)
                .offset(page.offset)
                .limit(page.size)
            )
            books = list(session.execute(stmt).scalars().all())
            for book in books:
                session.expunge(book)

        return Page(items=books, total=total, page=page.page, size=page.size)
