"""User storage.

Users live in a single table looked up by id, with secondary indexes for
login (email), admin statistics (role) and the approval queue
(instructor_status).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from coursehub.auth.permissions import InstructorStatus, UserRole
from coursehub.core.timestamps import as_utc, utcnow


USERS_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    name TEXT,
    password_hash TEXT,
    role TEXT,
    instructor_status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

AUTH_TABLES_CQL = [
    USERS_CQL,
    "CREATE INDEX IF NOT EXISTS users_by_email ON {keyspace}.users (email)",
    "CREATE INDEX IF NOT EXISTS users_by_role ON {keyspace}.users (role)",
    "CREATE INDEX IF NOT EXISTS users_by_instructor_status "
    "ON {keyspace}.users (instructor_status)",
]


@dataclass
class User:
    """An account.

    ``instructor_status`` is None for students and admins.
    Emails are stored lower-cased.
    """

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    name: str = ""
    password_hash: str = field(default="", repr=False)
    role: str = UserRole.STUDENT.value
    instructor_status: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.email = self.email.strip().lower()
        self.created_at = as_utc(self.created_at) or utcnow()
        self.updated_at = as_utc(self.updated_at)

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR.value

    @property
    def is_approved_instructor(self) -> bool:
        return (
            self.is_instructor
            and self.instructor_status == InstructorStatus.APPROVED.value
        )

    @classmethod
    def from_row(cls, row: Any) -> "User":
        return cls(
            id=row.id,
            email=row.email or "",
            name=row.name or "",
            password_hash=row.password_hash or "",
            role=row.role or UserRole.STUDENT.value,
            instructor_status=row.instructor_status,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
