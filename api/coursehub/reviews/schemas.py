"""Pydantic schemas for reviews."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from coursehub.reviews.models import MAX_RATING, MIN_RATING
from coursehub.reviews.service import ReviewWithAuthor


class ReviewRequest(BaseModel):
    rating: int = Field(
        ..., ge=MIN_RATING, le=MAX_RATING, strict=True, description="Rating 1-5"
    )
    comment: str = Field("", max_length=2000, description="Optional comment")


class ReviewResponse(BaseModel):
    id: UUID
    course_id: UUID
    student_id: UUID
    student_name: str | None = None
    rating: int
    comment: str = ""
    created_at: datetime

    @classmethod
    def from_item(cls, item: ReviewWithAuthor) -> "ReviewResponse":
        return cls(
            id=item.review.id,
            course_id=item.review.course_id,
            student_id=item.review.student_id,
            student_name=item.student_name,
            rating=item.review.rating,
            comment=item.review.comment,
            created_at=item.review.created_at,
        )


class ReviewCreatedResponse(BaseModel):
    message: str = "Review added"
    review: ReviewResponse
    avg_rating: float
    review_count: int


class CourseReviewsResponse(BaseModel):
    course_id: UUID
    reviews: list[ReviewResponse]
    avg_rating: float
    review_count: int


class RatingResponse(BaseModel):
    message: str
    avg_rating: float
    review_count: int


class ModerationReviewResponse(ReviewResponse):
    """Review flattened with its course for admin moderation."""

    course_title: str
    student_email: str = ""

    @classmethod
    def from_item(cls, item: ReviewWithAuthor) -> "ModerationReviewResponse":
        return cls(
            **ReviewResponse.from_item(item).model_dump(),
            course_title=item.course_title,
            student_email=item.student_email,
        )


class ModerationReviewListResponse(BaseModel):
    items: list[ModerationReviewResponse]
    total: int
