"""Book catalog module.

Provides functionality for:
- Adding books, unique by ISBN
- Lookup by id or ISBN
- Updating and deleting books
- Paginated search
"""

from .manager import CatalogManager

__all__ = ["CatalogManager"]
