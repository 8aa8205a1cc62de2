"""Tests for the review Cassandra repository."""

from unittest.mock import AsyncMock, MagicMock, Mock
from uuid import uuid4

import pytest
from cassandra import ConsistencyLevel

from coursehub.reviews.models import Review
from coursehub.reviews.repository import ReviewRepository


@pytest.fixture
def session():
    session = Mock()
    session.prepare = Mock(side_effect=lambda cql: MagicMock(name="prepared"))
    session.aexecute = AsyncMock()
    return session


class TestReviewRepository:
    """One review per (course, student), enforced by the insert."""

    def test_insert_is_conditional(self, session) -> None:
        ReviewRepository(session, "coursehub")

        statements = [call.args[0] for call in session.prepare.call_args_list]
        inserts = [s for s in statements if "INSERT INTO" in s]
        assert len(inserts) == 1
        assert "IF NOT EXISTS" in inserts[0]

    @pytest.mark.asyncio
    async def test_duplicate_is_not_applied(self, session) -> None:
        session.aexecute.return_value = Mock(was_applied=False)
        repo = ReviewRepository(session, "coursehub")
        review = Review(course_id=uuid4(), student_id=uuid4(), rating=4)

        assert await repo.add_if_absent(review) is False

    @pytest.mark.asyncio
    async def test_delete_targets_student_row(self, session) -> None:
        repo = ReviewRepository(session, "coursehub")
        review = Review(course_id=uuid4(), student_id=uuid4(), rating=4)

        await repo.delete(review)

        _, params = session.aexecute.call_args.args
        assert params == [review.course_id, review.student_id]

    def test_reads_and_writes_run_at_quorum(self, session) -> None:
        repo = ReviewRepository(session, "coursehub")

        assert repo._list_for_course.consistency_level == ConsistencyLevel.LOCAL_QUORUM
        assert repo._insert_if_absent.consistency_level == ConsistencyLevel.LOCAL_QUORUM
        assert (
            repo._insert_if_absent.serial_consistency_level
            == ConsistencyLevel.LOCAL_SERIAL
        )
