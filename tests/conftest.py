"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the library service,
including databases, managers, a controllable clock and a fake mail
transport.
"""

import os
import tempfile
from datetime import date
from email.message import EmailMessage
from pathlib import Path
from typing import Generator, Optional

import pytest

from libraryapi.catalog import CatalogManager
from libraryapi.config import reset_config
from libraryapi.db.models import Book
from libraryapi.db.schemas import BookCreate
from libraryapi.db.sqlite import Database, reset_db
from libraryapi.lending import LendingManager

TODAY = date(2025, 3, 10)


class FakeClock:
    """Callable clock returning a settable date."""

    def __init__(self, today: date = TODAY):
        self.current = today

    def __call__(self) -> date:
        return self.current


class FakeTransport:
    """Mail transport that records messages, optionally failing."""

    def __init__(self, error: Optional[Exception] = None):
        self.sent: list[EmailMessage] = []
        self.error = error

    def send(self, message: EmailMessage) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(message)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture(scope="function")
def db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture(scope="function")
def file_db(temp_db_path: Path) -> Generator[Database, None, None]:
    """Create a file-backed database, needed when several threads write."""
    database = Database(str(temp_db_path))
    database.create_tables()
    yield database
    database.engine.dispose()


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog(db: Database) -> CatalogManager:
    """Create a CatalogManager with test database."""
    return CatalogManager(db)


@pytest.fixture
def lending(db: Database, catalog: CatalogManager, clock: FakeClock) -> LendingManager:
    """Create a LendingManager with a four day grace period."""
    return LendingManager(db, catalog, grace_days=4, today=clock)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_book_data() -> BookCreate:
    """Create sample book data for testing."""
    return BookCreate(isbn="123", title="As Aventuras", author="Autor")


@pytest.fixture
def sample_book(catalog: CatalogManager, sample_book_data: BookCreate) -> Book:
    """Create and return a book in the catalog."""
    return catalog.add_book(sample_book_data)


@pytest.fixture
def multiple_books(catalog: CatalogManager) -> list[Book]:
    """Create multiple books in the catalog."""
    books_data = [
        BookCreate(isbn="111", title="The Hobbit", author="J. R. R. Tolkien"),
        BookCreate(isbn="222", title="The Silmarillion", author="J. R. R. Tolkien"),
        BookCreate(isbn="333", title="Dune", author="Frank Herbert"),
        BookCreate(isbn="444", title="Children of Dune", author="Frank Herbert"),
        BookCreate(isbn="555", title="Neuromancer", author="William Gibson"),
    ]
    return [catalog.add_book(data) for data in books_data]


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove LIBRARY_* and SMTP_* variables for the duration of a test."""
    prefixes = ("LIBRARY_", "SMTP_")
    saved = {k: v for k, v in os.environ.items() if k.startswith(prefixes)}
    for key in saved:
        del os.environ[key]
    reset_config()
    reset_db()
    yield
    for key in [k for k in os.environ if k.startswith(prefixes)]:
        del os.environ[key]
    os.environ.update(saved)
    reset_config()
    reset_db()


@pytest.fixture
def transport_factory():
    """Build FakeTransport instances, e.g. one that raises on send."""
    return FakeTransport
