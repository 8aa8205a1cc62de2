"""Database models for course categories.

Category names are unique case-insensitively. Uniqueness is held by the
``categories_by_name`` lookup table, written with a lightweight transaction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from coursehub.core.timestamps import as_utc, utcnow


CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories (
    id UUID PRIMARY KEY,
    name TEXT,
    created_at TIMESTAMP
)
"""

CATEGORY_BY_NAME_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories_by_name (
    name_key TEXT PRIMARY KEY,
    category_id UUID
)
"""

CATEGORIES_TABLES_CQL = [
    CATEGORY_TABLE_CQL,
    CATEGORY_BY_NAME_TABLE_CQL,
]


def name_key(name: str) -> str:
    """Normalized lookup key for a category name."""
    return name.strip().lower()


@dataclass
class Category:
    name: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        self.created_at = as_utc(self.created_at) or utcnow()

    @property
    def key(self) -> str:
        return name_key(self.name)

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        return cls(id=row.id, name=row.name or "", created_at=row.created_at)
