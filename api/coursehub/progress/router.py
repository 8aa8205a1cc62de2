"""Enrollment and progress API endpoints.

Provides routes for:
- Enrolling in a course
- Listing enrolled courses
- Completing modules
- Progress per course and across all enrolled courses
"""

from uuid import UUID

from fastapi import APIRouter

from coursehub.auth.dependencies import CurrentUser
from coursehub.courses.schemas import CourseResponse
from coursehub.progress.dependencies import EnrollmentLedgerDep, ProgressTrackerDep
from coursehub.progress.schemas import (
    CompleteModuleResponse,
    CourseProgressResponse,
    EnrolledCourseListResponse,
    EnrolledCourseResponse,
    EnrollmentResponse,
    ProgressListResponse,
)
from coursehub.progress.tracker import ProgressReport


router = APIRouter(prefix="/v1/courses", tags=["progress"])


def _progress_response(report: ProgressReport) -> CourseProgressResponse:
    return CourseProgressResponse(
        course_id=report.course_id,
        course_title=report.course_title,
        total_modules=report.total_modules,
        completed_modules=report.completed_modules,
        progress=report.progress,
    )


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentResponse,
    summary="Enroll in course",
)
async def enroll(
    course_id: UUID,
    ledger: EnrollmentLedgerDep,
    user: CurrentUser,
) -> EnrollmentResponse:
    """Enroll the current user. Enrolling again changes nothing."""
    result = await ledger.enroll(user.id, course_id)
    return EnrollmentResponse(
        message="Already enrolled" if result.already_enrolled else "Enrolled successfully",
        course_id=result.course_id,
        user_id=result.user_id,
        enrolled_at=result.enrolled_at,
        student_count=result.student_count,
        already_enrolled=result.already_enrolled,
    )


@router.get(
    "/student/enrolled",
    response_model=EnrolledCourseListResponse,
    summary="List enrolled courses",
)
async def list_enrolled_courses(
    ledger: EnrollmentLedgerDep,
    user: CurrentUser,
) -> EnrolledCourseListResponse:
    enrolled = await ledger.list_enrolled_courses(user.id)
    items = [
        EnrolledCourseResponse(
            **CourseResponse.from_course(e.course, e.instructor_name).model_dump(),
            enrolled_at=e.enrolled_at,
        )
        for e in enrolled
    ]
    return EnrolledCourseListResponse(items=items, total=len(items))


@router.get(
    "/student/progress",
    response_model=ProgressListResponse,
    summary="Progress in all enrolled courses",
)
async def get_all_progress(
    tracker: ProgressTrackerDep,
    user: CurrentUser,
) -> ProgressListResponse:
    reports = await tracker.get_progress_for_all_enrolled(user.id)
    items = [_progress_response(r) for r in reports]
    return ProgressListResponse(items=items, total=len(items))


@router.post(
    "/{course_id}/modules/{module_id}/complete",
    response_model=CompleteModuleResponse,
    summary="Complete module",
)
async def complete_module(
    course_id: UUID,
    module_id: UUID,
    tracker: ProgressTrackerDep,
    user: CurrentUser,
) -> CompleteModuleResponse:
    """Mark a module complete. Completing it again changes nothing."""
    result = await tracker.complete_module(user.id, course_id, module_id)
    return CompleteModuleResponse(
        message=(
            "Module already completed"
            if result.already_completed
            else "Module marked as completed"
        ),
        course_id=result.course_id,
        module_id=result.module_id,
        completed_at=result.completed_at,
        already_completed=result.already_completed,
        progress=result.progress,
    )


@router.get(
    "/{course_id}/progress",
    response_model=CourseProgressResponse,
    summary="Course progress",
)
async def get_progress(
    course_id: UUID,
    tracker: ProgressTrackerDep,
    user: CurrentUser,
) -> CourseProgressResponse:
    report = await tracker.get_progress(user.id, course_id)
    return _progress_response(report)
