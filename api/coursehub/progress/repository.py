"""Cassandra repositories for enrollments and completions."""

from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from coursehub.core.database.consistency import QUORUM, conditional, quorum
from coursehub.progress.models import CompletedModule, Enrollment


if TYPE_CHECKING:
    from cassandra.cluster import Session


class EnrollmentRepository:
    """Both sides of the enrollment relation.

    Every write touches ``enrollments`` and ``enrollments_by_user`` in one
    logged batch, which Cassandra applies fully or not at all.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = quorum(self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE course_id = ? AND user_id = ?
        """))
        self._list_students = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enrollments WHERE course_id = ?"
        )
        self._count_students = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.enrollments WHERE course_id = ?"
        )
        self._list_courses = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.enrollments_by_user WHERE user_id = ?"
        )

        self._insert_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments (course_id, user_id, enrolled_at)
            VALUES (?, ?, ?)
        """)
        self._insert_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_user
            (user_id, course_id, enrolled_at)
            VALUES (?, ?, ?)
        """)

        self._delete_by_course = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.enrollments
            WHERE course_id = ? AND user_id = ?
        """)
        self._delete_by_user = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.enrollments_by_user
            WHERE user_id = ? AND course_id = ?
        """)

    async def get(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        result = await self.session.aexecute(self._get, [course_id, user_id])
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def list_students(self, course_id: UUID) -> list[Enrollment]:
        rows = await self.session.aexecute(self._list_students, [course_id])
        return [Enrollment.from_row(row) for row in rows]

    async def count_students(self, course_id: UUID) -> int:
        result = await self.session.aexecute(self._count_students, [course_id])
        row = result.one()
        return row[0] if row else 0

    async def list_courses(self, user_id: UUID) -> list[Enrollment]:
        rows = await self.session.aexecute(self._list_courses, [user_id])
        return [Enrollment.from_row(row) for row in rows]

    async def add(self, enrollment: Enrollment) -> None:
        """Write both sides of the membership atomically."""
        batch = BatchStatement(batch_type=BatchType.LOGGED, consistency_level=QUORUM)
        batch.add(
            self._insert_by_course,
            [enrollment.course_id, enrollment.user_id, enrollment.enrolled_at],
        )
        batch.add(
            self._insert_by_user,
            [enrollment.user_id, enrollment.course_id, enrollment.enrolled_at],
        )
        await self.session.aexecute(batch)

    async def remove(self, enrollments: list[Enrollment]) -> None:
        """Remove both sides of each membership atomically."""
        if not enrollments:
            return
        batch = BatchStatement(batch_type=BatchType.LOGGED, consistency_level=QUORUM)
        for enrollment in enrollments:
            batch.add(
                self._delete_by_course, [enrollment.course_id, enrollment.user_id]
            )
            batch.add(self._delete_by_user, [enrollment.user_id, enrollment.course_id])
        await self.session.aexecute(batch)

    async def remove_course(self, course_id: UUID) -> list[Enrollment]:
        """Drop every membership of a course. Returns what was removed."""
        enrollments = await self.list_students(course_id)
        await self.remove(enrollments)
        return enrollments

    async def remove_user(self, user_id: UUID) -> list[Enrollment]:
        """Drop every membership of a user. Returns what was removed."""
        enrollments = await self.list_courses(user_id)
        await self.remove(enrollments)
        return enrollments


class CompletionRepository:
    """Append-only store of completed modules."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.completed_modules
            WHERE user_id = ? AND course_id = ? AND module_id = ?
        """)
        self._list_for_course = quorum(self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.completed_modules
            WHERE user_id = ? AND course_id = ?
        """))
        self._insert_if_absent = conditional(self.session.prepare(f"""
            INSERT INTO {self.keyspace}.completed_modules
            (user_id, course_id, module_id, completed_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """))
        self._delete_for_course = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.completed_modules
            WHERE user_id = ? AND course_id = ?
        """)

    async def get(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> CompletedModule | None:
        result = await self.session.aexecute(self._get, [user_id, course_id, module_id])
        row = result.one()
        return CompletedModule.from_row(row) if row else None

    async def list_for_course(
        self, user_id: UUID, course_id: UUID
    ) -> list[CompletedModule]:
        rows = await self.session.aexecute(self._list_for_course, [user_id, course_id])
        return [CompletedModule.from_row(row) for row in rows]

    async def add_if_absent(self, completion: CompletedModule) -> bool:
        """Insert a completion unless one exists for the same module.

        Returns:
            True if this call created the record
        """
        result = await self.session.aexecute(
            self._insert_if_absent,
            [
                completion.user_id,
                completion.course_id,
                completion.module_id,
                completion.completed_at,
            ],
        )
        return bool(result.was_applied)

    async def delete_for_course(self, user_id: UUID, course_id: UUID) -> None:
        await self.session.aexecute(self._delete_for_course, [user_id, course_id])
