"""Course and module storage.

A course row carries a denormalized rating aggregate (avg_rating,
review_count) recomputed from ``course_reviews`` after every review change.
Modules cluster by position inside their course partition, so reading a
partition returns them in order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from coursehub.core.timestamps import as_utc, utcnow


# avg_rating/review_count are derived from course_reviews; rating_version
# guards their conditional update.
COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    price DECIMAL,
    thumbnail_url TEXT,
    category_id UUID,
    instructor_id UUID,
    avg_rating DOUBLE,
    review_count INT,
    rating_version INT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

COURSE_INSTRUCTOR_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS courses_instructor_idx
ON {keyspace}.courses (instructor_id)
"""

COURSE_CATEGORY_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS courses_category_idx
ON {keyspace}.courses (category_id)
"""

# Ordered by position within the course partition
COURSE_MODULES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_modules (
    course_id UUID,
    position INT,
    module_id UUID,
    title TEXT,
    video_url TEXT,
    pdf_url TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (course_id, position, module_id)
) WITH CLUSTERING ORDER BY (position ASC, module_id ASC)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
    COURSE_INSTRUCTOR_INDEX_CQL,
    COURSE_CATEGORY_INDEX_CQL,
    COURSE_MODULES_TABLE_CQL,
]


@dataclass
class Module:
    course_id: UUID
    title: str = ""
    video_url: str | None = None
    pdf_url: str | None = None
    position: int = 0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at) or utcnow()
        self.updated_at = as_utc(self.updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Module":
        return cls(
            id=row.module_id,
            course_id=row.course_id,
            title=row.title or "",
            video_url=row.video_url,
            pdf_url=row.pdf_url,
            position=row.position,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@dataclass
class Course:
    """A course owned by one instructor.

    ``rating_version`` increases with every write of the rating aggregate
    and is the condition of that write. ``modules`` is only filled when a
    service loads them.
    """

    instructor_id: UUID
    title: str = ""
    description: str = ""
    price: Decimal = Decimal(0)
    thumbnail_url: str | None = None
    category_id: UUID | None = None
    avg_rating: float = 0.0
    review_count: int = 0
    rating_version: int = 0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    modules: list[Module] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at) or utcnow()
        self.updated_at = as_utc(self.updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        return cls(
            id=row.id,
            instructor_id=row.instructor_id,
            title=row.title or "",
            description=row.description or "",
            price=row.price if row.price is not None else Decimal(0),
            thumbnail_url=row.thumbnail_url,
            category_id=row.category_id,
            avg_rating=row.avg_rating or 0.0,
            review_count=row.review_count or 0,
            rating_version=row.rating_version or 0,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def get_module(self, module_id: UUID) -> Module | None:
        return next((m for m in self.modules if m.id == module_id), None)

    def has_module(self, module_id: UUID) -> bool:
        return self.get_module(module_id) is not None
