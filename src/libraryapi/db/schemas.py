"""Pydantic schemas for catalog input and paginated results."""

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


# ============================================================================
# Pagination
# ============================================================================


class PageRequest(BaseModel):
    """Zero-based page number and page size."""

    page: int = Field(0, ge=0)
    size: int = Field(..., ge=1)

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page(Generic[T]):
    """A page of results together with the total match count."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


# ============================================================================
# Book Schemas
# ============================================================================


class BookBase(BaseModel):
    """Base book fields."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=500)


class BookCreate(BookBase):
    """Schema for adding a book to the catalog."""

    isbn: str = Field(..., max_length=100)

    @field_validator("isbn")
    @classmethod
    def strip_isbn(cls, v: str) -> str:
        return v.strip()


class BookUpdate(BaseModel):
    """Schema for updating a book. ISBN is not changed through this path."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    author: Optional[str] = Field(None, min_length=1, max_length=500)


class BookFilter(BaseModel):
    """Catalog search filter. Set fields match as case-insensitive substrings."""

    isbn: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
