"""Admin API endpoints.

Every route requires the admin role.

Provides routes for:
- Platform statistics
- User listing and deletion
- Course listing and deletion
- Review moderation
- Instructor approval
"""

from uuid import UUID

from fastapi import APIRouter

from coursehub.admin.dependencies import AdminServiceDep
from coursehub.admin.schemas import (
    InstructorStatusResponse,
    StatsResponse,
    UserListResponse,
)
from coursehub.auth.approval import StatusChange
from coursehub.auth.dependencies import AdminUser, ApprovalServiceDep
from coursehub.auth.schemas import MessageResponse, UserResponse
from coursehub.courses.schemas import CourseListResponse, CourseResponse
from coursehub.reviews.dependencies import ReviewAggregatorDep
from coursehub.reviews.schemas import (
    ModerationReviewListResponse,
    ModerationReviewResponse,
    RatingResponse,
)


router = APIRouter(prefix="/v1/admin", tags=["admin"])


# ==============================================================================
# Stats & Users
# ==============================================================================


@router.get("/stats", response_model=StatsResponse, summary="Platform stats")
async def get_stats(
    admin_service: AdminServiceDep,
    _admin: AdminUser,
) -> StatsResponse:
    stats = await admin_service.stats()
    return StatsResponse(
        total_users=stats.total_users,
        total_courses=stats.total_courses,
        total_students=stats.total_students,
        total_instructors=stats.total_instructors,
    )


@router.get("/users", response_model=UserListResponse, summary="List users")
async def list_users(
    admin_service: AdminServiceDep,
    _admin: AdminUser,
) -> UserListResponse:
    users = await admin_service.list_users()
    items = [UserResponse.from_user(u) for u in users]
    return UserListResponse(items=items, total=len(items))


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    summary="Delete user",
)
async def delete_user(
    user_id: UUID,
    admin_service: AdminServiceDep,
    admin: AdminUser,
) -> MessageResponse:
    await admin_service.delete_user(admin.id, user_id)
    return MessageResponse(message="User deleted successfully")


# ==============================================================================
# Courses
# ==============================================================================


@router.get("/courses", response_model=CourseListResponse, summary="List all courses")
async def list_courses(
    admin_service: AdminServiceDep,
    _admin: AdminUser,
) -> CourseListResponse:
    views = await admin_service.list_courses()
    items = [CourseResponse.from_view(v) for v in views]
    return CourseListResponse(items=items, total=len(items))


@router.delete(
    "/courses/{course_id}",
    response_model=MessageResponse,
    summary="Delete course",
)
async def delete_course(
    course_id: UUID,
    admin_service: AdminServiceDep,
    _admin: AdminUser,
) -> MessageResponse:
    await admin_service.delete_course(course_id)
    return MessageResponse(message="Course deleted successfully")


# ==============================================================================
# Reviews
# ==============================================================================


@router.get(
    "/reviews",
    response_model=ModerationReviewListResponse,
    summary="List all reviews",
)
async def list_reviews(
    aggregator: ReviewAggregatorDep,
    _admin: AdminUser,
) -> ModerationReviewListResponse:
    reviews = await aggregator.list_all_reviews()
    items = [ModerationReviewResponse.from_item(r) for r in reviews]
    return ModerationReviewListResponse(items=items, total=len(items))


@router.delete(
    "/reviews/{course_id}/{review_id}",
    response_model=RatingResponse,
    summary="Delete review",
)
async def delete_review(
    course_id: UUID,
    review_id: UUID,
    aggregator: ReviewAggregatorDep,
    _admin: AdminUser,
) -> RatingResponse:
    summary = await aggregator.delete_review(course_id, review_id)
    return RatingResponse(
        message="Review deleted",
        avg_rating=summary.avg_rating,
        review_count=summary.review_count,
    )


# ==============================================================================
# Instructor Approval
# ==============================================================================


def _status_response(change: StatusChange, verb: str) -> InstructorStatusResponse:
    message = (
        f"Instructor {verb}"
        if change.changed
        else f"Instructor already {verb}"
    )
    return InstructorStatusResponse(
        message=message,
        user=UserResponse.from_user(change.user),
        previous_status=change.previous_status,
        changed=change.changed,
    )


@router.get(
    "/instructors/pending",
    response_model=UserListResponse,
    summary="List pending instructors",
)
async def list_pending_instructors(
    approval_service: ApprovalServiceDep,
    _admin: AdminUser,
) -> UserListResponse:
    users = await approval_service.list_pending()
    items = [UserResponse.from_user(u) for u in users]
    return UserListResponse(items=items, total=len(items))


@router.post(
    "/instructors/{user_id}/approve",
    response_model=InstructorStatusResponse,
    summary="Approve instructor",
)
async def approve_instructor(
    user_id: UUID,
    approval_service: ApprovalServiceDep,
    _admin: AdminUser,
) -> InstructorStatusResponse:
    change = await approval_service.approve(user_id)
    return _status_response(change, "approved")


@router.post(
    "/instructors/{user_id}/reject",
    response_model=InstructorStatusResponse,
    summary="Reject instructor",
)
async def reject_instructor(
    user_id: UUID,
    approval_service: ApprovalServiceDep,
    _admin: AdminUser,
) -> InstructorStatusResponse:
    change = await approval_service.reject(user_id)
    return _status_response(change, "rejected")
