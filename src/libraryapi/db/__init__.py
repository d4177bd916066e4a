"""Database module for local SQLite storage."""

from .models import Base, Book
from .schemas import BookCreate, BookFilter, BookUpdate, Page, PageRequest
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "BookCreate",
    "BookFilter",
    "BookUpdate",
    "Page",
    "PageRequest",
    "Database",
    "get_db",
    "reset_db",
]
