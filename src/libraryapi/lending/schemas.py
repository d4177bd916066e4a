"""Pydantic schemas for book lending."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LoanCreate(BaseModel):
    """Schema for issuing a loan against a resolved book."""

    book_id: int
    isbn: str = Field(..., min_length=1, max_length=100)
    customer: str = Field(..., min_length=1, max_length=200)
    customer_email: str = Field(..., min_length=3, max_length=200)

    @field_validator("customer_email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        """Reject addresses that are obviously not email addresses."""
        v = v.strip()
        if "@" not in v:
            raise ValueError("customer_email must be an email address")
        return v


class LoanFilter(BaseModel):
    """Loan search filter.

    A loan matches when its ISBN equals ``isbn`` OR its customer equals
    ``customer``. With neither field set, every loan matches.
    """

    isbn: Optional[str] = None
    customer: Optional[str] = None
