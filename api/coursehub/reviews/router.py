"""Course review API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from coursehub.auth.dependencies import CurrentUser
from coursehub.reviews.dependencies import ReviewAggregatorDep
from coursehub.reviews.schemas import (
    CourseReviewsResponse,
    ReviewCreatedResponse,
    ReviewRequest,
    ReviewResponse,
)


router = APIRouter(prefix="/v1/courses", tags=["reviews"])


@router.post(
    "/{course_id}/reviews",
    response_model=ReviewCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review course",
)
async def add_review(
    course_id: UUID,
    data: ReviewRequest,
    aggregator: ReviewAggregatorDep,
    user: CurrentUser,
) -> ReviewCreatedResponse:
    """Add the current student's review. One review per course."""
    item, summary = await aggregator.add_review(
        user.id, course_id, data.rating, data.comment
    )
    return ReviewCreatedResponse(
        review=ReviewResponse.from_item(item),
        avg_rating=summary.avg_rating,
        review_count=summary.review_count,
    )


@router.get(
    "/{course_id}/reviews",
    response_model=CourseReviewsResponse,
    summary="List course reviews",
)
async def get_reviews(
    course_id: UUID,
    aggregator: ReviewAggregatorDep,
) -> CourseReviewsResponse:
    result = await aggregator.get_reviews(course_id)
    return CourseReviewsResponse(
        course_id=result.course_id,
        reviews=[ReviewResponse.from_item(r) for r in result.reviews],
        avg_rating=result.avg_rating,
        review_count=result.review_count,
    )
