"""Database models for course reviews.

The primary key ``(course_id, student_id)`` holds at most one review per
student and course; inserts use IF NOT EXISTS so the storage enforces it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from coursehub.core.timestamps import as_utc, utcnow


COURSE_REVIEWS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_reviews (
    course_id UUID,
    student_id UUID,
    review_id UUID,
    rating INT,
    comment TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY (course_id, student_id)
)
"""

REVIEWS_TABLES_CQL = [
    COURSE_REVIEWS_TABLE_CQL,
]

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class Review:
    """A student's rating and comment for a course."""

    course_id: UUID
    student_id: UUID
    rating: int
    comment: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Review":
        return cls(
            id=row.review_id,
            course_id=row.course_id,
            student_id=row.student_id,
            rating=row.rating,
            comment=row.comment or "",
            created_at=row.created_at,
        )


def average_rating(reviews: list[Review]) -> float:
    """Mean rating, 0 when there are no reviews."""
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)
