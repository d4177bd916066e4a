"""Book lending module.

Provides functionality for:
- Issuing loans, at most one active loan per book
- Returning loans
- Loan search and per-book history
- Overdue detection
"""

from .manager import LendingManager
from .models import Loan
from .overdue import OverdueScanner
from .schemas import LoanCreate, LoanFilter

__all__ = [
    "LendingManager",
    "Loan",
    "OverdueScanner",
    "LoanCreate",
    "LoanFilter",
]
