"""Review aggregation service.

One review per student and course. After every insert or delete the
course's ``avg_rating`` and ``review_count`` are recomputed from the full
review list and written with a conditional update on ``rating_version``.
A writer that loses the race re-reads and tries again.
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.config.settings import get_settings
from coursehub.core.errors import (
    ConflictError,
    CourseNotFoundError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from coursehub.reviews.models import MAX_RATING, MIN_RATING, Review, average_rating


if TYPE_CHECKING:
    from coursehub.auth.repository import UserRepository
    from coursehub.courses.repository import CourseRepository
    from coursehub.progress.ledger import EnrollmentLedger
    from coursehub.reviews.repository import ReviewRepository

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ReviewNotFoundError(NotFoundError):
    def __init__(self, message: str = "Review not found"):
        super().__init__(message, "review_not_found")


class ReviewExistsError(ConflictError):
    def __init__(self, message: str = "You have already reviewed this course"):
        super().__init__(message, "review_exists")


class InvalidRatingError(InvalidInputError):
    def __init__(self, message: str = "Rating must be an integer from 1 to 5"):
        super().__init__(message, "invalid_rating")


class RatingUpdateError(InternalError):
    def __init__(self, message: str = "Could not update course rating"):
        super().__init__(message, "rating_update_failed")


# ==============================================================================
# Result Types
# ==============================================================================


@dataclass
class RatingSummary:
    avg_rating: float
    review_count: int


@dataclass
class ReviewWithAuthor:
    review: Review
    student_name: str
    student_email: str = ""
    course_title: str = ""


@dataclass
class CourseReviews:
    course_id: UUID
    reviews: list[ReviewWithAuthor]
    avg_rating: float
    review_count: int


def validate_rating(rating: object) -> int:
    """Accept integers 1..5 only (bools are rejected)."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError
    return rating


# ==============================================================================
# Review Aggregator
# ==============================================================================


class ReviewAggregator:
    """Add, delete and list reviews while keeping the course rating exact."""

    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        reviews: "ReviewRepository",
        ledger: "EnrollmentLedger",
        max_attempts: int | None = None,
    ):
        self.users = users
        self.courses = courses
        self.reviews = reviews
        self.ledger = ledger
        self.max_attempts = max_attempts or get_settings().rating_update_max_attempts

    async def add_review(
        self, user_id: UUID, course_id: UUID, rating: int, comment: str = ""
    ) -> tuple[ReviewWithAuthor, RatingSummary]:
        """Add the student's review and refresh the course rating.

        Raises:
            CourseNotFoundError: If the course does not exist
            InvalidRatingError: If rating is not an integer in [1, 5]
            NotEnrolledError: If the user is not enrolled
            ReviewExistsError: If the user already reviewed the course
            RatingUpdateError: If the rating could not be refreshed; the
                review is removed again
        """
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        rating = validate_rating(rating)
        await self.ledger.require_enrollment(user_id, course_id, "Enroll to review")

        review = Review(
            course_id=course_id,
            student_id=user_id,
            rating=rating,
            comment=comment.strip(),
        )
        if not await self.reviews.add_if_absent(review):
            raise ReviewExistsError

        try:
            summary = await self.refresh_rating(course_id)
        except Exception:
            # Undo the insert so the stored rating still matches the reviews
            await self.reviews.delete(review)
            logger.warning("review_add_rolled_back", course_id=str(course_id))
            raise

        logger.info(
            "review_added",
            course_id=str(course_id),
            review_id=str(review.id),
            rating=rating,
        )
        authored = await self._with_authors([review], course.title)
        return authored[0], summary

    async def delete_review(self, course_id: UUID, review_id: UUID) -> RatingSummary:
        """Remove a review (moderation) and refresh the course rating.

        Raises:
            CourseNotFoundError: If the course does not exist
            ReviewNotFoundError: If the course has no such review
            RatingUpdateError: If the rating could not be refreshed; the
                review is restored
        """
        if await self.courses.get(course_id) is None:
            raise CourseNotFoundError

        reviews = await self.reviews.list_for_course(course_id)
        review = next((r for r in reviews if r.id == review_id), None)
        if review is None:
            raise ReviewNotFoundError

        await self.reviews.delete(review)
        try:
            summary = await self.refresh_rating(course_id)
        except Exception:
            await self.reviews.add_if_absent(review)
            logger.warning(
                "review_delete_rolled_back",
                course_id=str(course_id),
                review_id=str(review_id),
            )
            raise

        logger.info("review_deleted", course_id=str(course_id), review_id=str(review_id))
        return summary

    async def get_reviews(self, course_id: UUID) -> CourseReviews:
        """Reviews of a course with author names and the current average.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError

        reviews = await self.reviews.list_for_course(course_id)
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return CourseReviews(
            course_id=course_id,
            reviews=await self._with_authors(reviews, course.title),
            avg_rating=average_rating(reviews),
            review_count=len(reviews),
        )

    async def list_all_reviews(self) -> list[ReviewWithAuthor]:
        """Every review on the platform, newest first, for moderation."""
        reviews = await self.reviews.list_all()
        course_ids = {r.course_id for r in reviews}
        courses = await asyncio.gather(*(self.courses.get(cid) for cid in course_ids))
        titles = {c.id: c.title for c in courses if c is not None}

        reviews.sort(key=lambda r: r.created_at, reverse=True)
        result = []
        for review in reviews:
            if review.course_id not in titles:
                continue
            result.extend(await self._with_authors([review], titles[review.course_id]))
        return result

    async def _with_authors(
        self, reviews: list[Review], course_title: str
    ) -> list[ReviewWithAuthor]:
        students = await asyncio.gather(
            *(self.users.get_by_id(r.student_id) for r in reviews)
        )
        return [
            ReviewWithAuthor(
                review=review,
                student_name=student.name if student else "Deleted user",
                student_email=student.email if student else "",
                course_title=course_title,
            )
            for review, student in zip(reviews, students, strict=True)
        ]

    async def refresh_rating(self, course_id: UUID) -> RatingSummary:
        """Recompute the rating aggregate from the authoritative review list.

        Raises:
            CourseNotFoundError: If the course vanished meanwhile
            RatingUpdateError: If every attempt lost a concurrent update
        """
        for attempt in range(1, self.max_attempts + 1):
            course = await self.courses.get(course_id)
            if course is None:
                raise CourseNotFoundError

            reviews = await self.reviews.list_for_course(course_id)
            summary = RatingSummary(
                avg_rating=average_rating(reviews), review_count=len(reviews)
            )
            applied = await self.courses.update_rating(
                course_id,
                summary.avg_rating,
                summary.review_count,
                course.rating_version,
            )
            if applied:
                return summary

            logger.warning(
                "rating_update_conflict",
                course_id=str(course_id),
                attempt=attempt,
                expected_version=course.rating_version,
            )

        logger.error(
            "rating_update_failed",
            course_id=str(course_id),
            attempts=self.max_attempts,
        )
        raise RatingUpdateError
