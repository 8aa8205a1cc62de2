"""Cassandra repositories for courses and course modules."""

from typing import TYPE_CHECKING
from uuid import UUID

from coursehub.core.database.consistency import conditional, quorum
from coursehub.courses.models import Course, Module


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CourseRepository:
    """Persistence for the courses table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get = quorum(
            self.session.prepare(f"SELECT * FROM {self.keyspace}.courses WHERE id = ?")
        )
        self._list_all = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses"
        )
        self._list_by_category = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE category_id = ?"
        )
        self._list_by_instructor = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE instructor_id = ?"
        )
        self._count = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.courses"
        )
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (id, title, description, price, thumbnail_url, category_id,
             instructor_id, avg_rating, review_count, rating_version,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_details = self.session.prepare(f"""
            UPDATE {self.keyspace}.courses
            SET title = ?, description = ?, price = ?, thumbnail_url = ?,
                category_id = ?, updated_at = ?
            WHERE id = ?
        """)
        # Lightweight transaction: only the writer holding the current
        # version wins.
        self._update_rating = conditional(self.session.prepare(f"""
            UPDATE {self.keyspace}.courses
            SET avg_rating = ?, review_count = ?, rating_version = ?
            WHERE id = ?
            IF rating_version = ?
        """))
        self._delete = self.session.prepare(
            f"DELETE FROM {self.keyspace}.courses WHERE id = ?"
        )

    async def get(self, course_id: UUID) -> Course | None:
        result = await self.session.aexecute(self._get, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def list_all(self, category_id: UUID | None = None) -> list[Course]:
        if category_id is None:
            rows = await self.session.aexecute(self._list_all)
        else:
            rows = await self.session.aexecute(self._list_by_category, [category_id])
        return [Course.from_row(row) for row in rows]

    async def list_by_instructor(self, instructor_id: UUID) -> list[Course]:
        rows = await self.session.aexecute(self._list_by_instructor, [instructor_id])
        return [Course.from_row(row) for row in rows]

    async def count(self) -> int:
        result = await self.session.aexecute(self._count)
        row = result.one()
        return row[0] if row else 0

    async def insert(self, course: Course) -> None:
        await self.session.aexecute(
            self._insert,
            [
                course.id,
                course.title,
                course.description,
                course.price,
                course.thumbnail_url,
                course.category_id,
                course.instructor_id,
                course.avg_rating,
                course.review_count,
                course.rating_version,
                course.created_at,
                course.updated_at,
            ],
        )

    async def update_details(self, course: Course) -> None:
        await self.session.aexecute(
            self._update_details,
            [
                course.title,
                course.description,
                course.price,
                course.thumbnail_url,
                course.category_id,
                course.updated_at,
                course.id,
            ],
        )

    async def update_rating(
        self,
        course_id: UUID,
        avg_rating: float,
        review_count: int,
        expected_version: int,
    ) -> bool:
        """Write the rating aggregate if nobody else did since it was read.

        Returns:
            True if applied, False if ``rating_version`` moved on
        """
        result = await self.session.aexecute(
            self._update_rating,
            [avg_rating, review_count, expected_version + 1, course_id, expected_version],
        )
        return bool(result.was_applied)

    async def delete(self, course_id: UUID) -> None:
        await self.session.aexecute(self._delete, [course_id])


class ModuleRepository:
    """Persistence for the course_modules table."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._list_for_course = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.course_modules WHERE course_id = ?"
        )
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_modules
            (course_id, position, module_id, title, video_url, pdf_url,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._delete = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.course_modules
            WHERE course_id = ? AND position = ? AND module_id = ?
        """)
        self._delete_all = self.session.prepare(
            f"DELETE FROM {self.keyspace}.course_modules WHERE course_id = ?"
        )

    async def list_for_course(self, course_id: UUID) -> list[Module]:
        """Modules of a course in position order."""
        rows = await self.session.aexecute(self._list_for_course, [course_id])
        return [Module.from_row(row) for row in rows]

    async def save(self, module: Module) -> None:
        await self.session.aexecute(
            self._upsert,
            [
                module.course_id,
                module.position,
                module.id,
                module.title,
                module.video_url,
                module.pdf_url,
                module.created_at,
                module.updated_at,
            ],
        )

    async def delete(self, module: Module) -> None:
        await self.session.aexecute(
            self._delete, [module.course_id, module.position, module.id]
        )

    async def delete_all(self, course_id: UUID) -> None:
        await self.session.aexecute(self._delete_all, [course_id])
