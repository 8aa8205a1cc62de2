"""Cassandra repository for users."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from coursehub.auth.models import User


if TYPE_CHECKING:
    from cassandra.cluster import Session


class UserRepository:
    """Persistence for the users table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE id = ?"
        )
        self._get_by_email = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE email = ?"
        )
        self._list_all = self.session.prepare(f"SELECT * FROM {self.keyspace}.users")
        self._list_by_status = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE instructor_status = ?"
        )
        self._count_by_role = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.users WHERE role = ?"
        )
        self._count_all = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.users"
        )
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.users
            (id, email, name, password_hash, role, instructor_status,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_password = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET password_hash = ?, updated_at = ?
            WHERE id = ?
        """)
        self._update_instructor_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET instructor_status = ?, updated_at = ?
            WHERE id = ?
        """)
        self._delete = self.session.prepare(
            f"DELETE FROM {self.keyspace}.users WHERE id = ?"
        )

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self.session.aexecute(self._get_by_id, [user_id])
        row = result.one()
        return User.from_row(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.aexecute(self._get_by_email, [email.lower()])
        row = result.one()
        return User.from_row(row) if row else None

    async def list_all(self) -> list[User]:
        rows = await self.session.aexecute(self._list_all)
        return [User.from_row(row) for row in rows]

    async def list_by_instructor_status(self, status: str) -> list[User]:
        rows = await self.session.aexecute(self._list_by_status, [status])
        return [User.from_row(row) for row in rows]

    async def count(self, role: str | None = None) -> int:
        """Count users, optionally restricted to one role."""
        if role is None:
            result = await self.session.aexecute(self._count_all)
        else:
            result = await self.session.aexecute(self._count_by_role, [role])
        row = result.one()
        return row[0] if row else 0

    async def insert(self, user: User) -> None:
        await self.session.aexecute(
            self._insert,
            [
                user.id,
                user.email,
                user.name,
                user.password_hash,
                user.role,
                user.instructor_status,
                user.created_at,
                user.updated_at,
            ],
        )

    async def update_password(
        self, user_id: UUID, password_hash: str, updated_at: datetime
    ) -> None:
        await self.session.aexecute(
            self._update_password, [password_hash, updated_at, user_id]
        )

    async def update_instructor_status(
        self, user_id: UUID, status: str, updated_at: datetime
    ) -> None:
        await self.session.aexecute(
            self._update_instructor_status, [status, updated_at, user_id]
        )

    async def delete(self, user_id: UUID) -> None:
        await self.session.aexecute(self._delete, [user_id])
