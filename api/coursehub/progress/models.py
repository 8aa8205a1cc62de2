"""Enrollment and completion storage.

A membership is stored twice, keyed by course (``enrollments``) and by
student (``enrollments_by_user``). The repository writes and deletes both
rows in one logged batch, so either both views hold a membership or
neither does.

Completions live in one partition per (student, course) and are only
ever inserted, with IF NOT EXISTS.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from coursehub.core.timestamps import as_utc, utcnow


ENROLLMENTS_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    course_id UUID,
    user_id UUID,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (course_id, user_id)
)
"""

ENROLLMENTS_BY_USER_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_user (
    user_id UUID,
    course_id UUID,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (user_id, course_id)
) WITH CLUSTERING ORDER BY (course_id ASC)
"""

COMPLETIONS_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.completed_modules (
    user_id UUID,
    course_id UUID,
    module_id UUID,
    completed_at TIMESTAMP,
    PRIMARY KEY ((user_id, course_id), module_id)
)
"""

PROGRESS_TABLES_CQL = [ENROLLMENTS_CQL, ENROLLMENTS_BY_USER_CQL, COMPLETIONS_CQL]


@dataclass
class Enrollment:
    user_id: UUID
    course_id: UUID
    enrolled_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.enrolled_at = as_utc(self.enrolled_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        # Rows of both enrollment tables carry the same columns
        return cls(user_id=row.user_id, course_id=row.course_id, enrolled_at=row.enrolled_at)


@dataclass
class CompletedModule:
    user_id: UUID
    course_id: UUID
    module_id: UUID
    completed_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.completed_at = as_utc(self.completed_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "CompletedModule":
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            module_id=row.module_id,
            completed_at=row.completed_at,
        )
