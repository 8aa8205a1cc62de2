"""Cassandra repository for course reviews."""

from typing import TYPE_CHECKING
from uuid import UUID

from coursehub.core.database.consistency import conditional, quorum
from coursehub.reviews.models import Review


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ReviewRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._list_for_course = quorum(
            self.session.prepare(
                f"SELECT * FROM {self.keyspace}.course_reviews WHERE course_id = ?"
            )
        )
        self._list_all = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.course_reviews"
        )
        self._insert_if_absent = conditional(self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_reviews
            (course_id, student_id, review_id, rating, comment, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """))
        self._delete = quorum(self.session.prepare(f"""
            DELETE FROM {self.keyspace}.course_reviews
            WHERE course_id = ? AND student_id = ?
        """))
        self._delete_all = self.session.prepare(
            f"DELETE FROM {self.keyspace}.course_reviews WHERE course_id = ?"
        )

    async def list_for_course(self, course_id: UUID) -> list[Review]:
        rows = await self.session.aexecute(self._list_for_course, [course_id])
        return [Review.from_row(row) for row in rows]

    async def list_all(self) -> list[Review]:
        rows = await self.session.aexecute(self._list_all)
        return [Review.from_row(row) for row in rows]

    async def add_if_absent(self, review: Review) -> bool:
        """Insert a review unless the student already reviewed the course.

        Returns:
            True if this call created the review
        """
        result = await self.session.aexecute(
            self._insert_if_absent,
            [
                review.course_id,
                review.student_id,
                review.id,
                review.rating,
                review.comment,
                review.created_at,
            ],
        )
        return bool(result.was_applied)

    async def delete(self, review: Review) -> None:
        await self.session.aexecute(self._delete, [review.course_id, review.student_id])

    async def delete_all(self, course_id: UUID) -> None:
        await self.session.aexecute(self._delete_all, [course_id])
