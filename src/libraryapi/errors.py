"""Exceptions raised by the catalog, ledger and notification layers."""


class LibraryError(Exception):
    """Base exception for library operations."""

    pass


class NotFoundError(LibraryError):
    """Raised when a requested record does not exist."""

    pass


class BookNotFoundError(NotFoundError):
    """Raised when a book cannot be resolved by id or ISBN."""

    def __init__(self, message: str = "Book not found"):
        super().__init__(message)


class LoanNotFoundError(NotFoundError):
    """Raised when a loan id does not exist."""

    def __init__(self, message: str = "Loan not found"):
        super().__init__(message)


class DuplicateIsbnError(LibraryError):
    """Raised when a book is added with an ISBN already in the catalog."""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__("ISBN already registered")


class InvalidArgumentError(LibraryError, ValueError):
    """Raised when a mutation is attempted without a required identity."""

    pass


class BookAlreadyLoanedError(LibraryError):
    """Raised when issuing a loan for a book that has an active loan."""

    def __init__(self, message: str = "Book already loaned"):
        super().__init__(message)


class NotificationError(LibraryError):
    """Raised when the mail transport fails to deliver a notification."""

    pass
