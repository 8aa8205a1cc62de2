"""Course categories module."""

from coursehub.categories.models import CATEGORIES_TABLES_CQL, Category


__all__ = [
    "CATEGORIES_TABLES_CQL",
    "Category",
]
