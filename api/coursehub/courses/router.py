"""Course management API endpoints.

Provides routes for:
- Courses: list, detail, create, edit, delete
- Modules: add, edit, delete
- Instructors: own courses and public profile
"""

from uuid import UUID

from fastapi import APIRouter, status

from coursehub.auth.dependencies import InstructorUser, OptionalUser
from coursehub.auth.schemas import MessageResponse
from coursehub.courses.dependencies import CourseServiceDep
from coursehub.courses.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    CreateCourseRequest,
    InstructorCourseListResponse,
    InstructorCourseResponse,
    InstructorProfileResponse,
    ModuleRequest,
    ModuleResponse,
    UpdateCourseRequest,
    UpdateModuleRequest,
)


router = APIRouter(prefix="/v1/courses", tags=["courses"])


# ==============================================================================
# Courses
# ==============================================================================


@router.get("", response_model=CourseListResponse, summary="List courses")
async def list_courses(
    course_service: CourseServiceDep,
    category_id: UUID | None = None,
) -> CourseListResponse:
    """List all courses with their rating (public)."""
    views = await course_service.list_courses(category_id)
    items = [CourseResponse.from_view(v) for v in views]
    return CourseListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=CourseDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> CourseDetailResponse:
    """Create a new course (approved instructors only)."""
    course = await course_service.create_course(user.id, data)
    view = await course_service.view(course)
    return CourseDetailResponse.from_view(view)


@router.get(
    "/instructor/my",
    response_model=InstructorCourseListResponse,
    summary="List my courses",
)
async def list_my_courses(
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> InstructorCourseListResponse:
    """Courses owned by the current instructor, with enrolled students."""
    views = await course_service.list_instructor_courses(user.id)
    items = [InstructorCourseResponse.from_view(v) for v in views]
    return InstructorCourseListResponse(items=items, total=len(items))


@router.get(
    "/instructors/{instructor_id}",
    response_model=InstructorProfileResponse,
    summary="Instructor profile",
)
async def get_instructor_profile(
    instructor_id: UUID,
    course_service: CourseServiceDep,
) -> InstructorProfileResponse:
    profile = await course_service.instructor_profile(instructor_id)
    courses = [CourseResponse.from_view(v) for v in profile.courses]
    return InstructorProfileResponse(
        id=profile.instructor.id,
        name=profile.instructor.name,
        email=profile.instructor.email,
        courses=courses,
        total_courses=len(courses),
        total_students=profile.total_students,
    )


@router.get(
    "/{course_id}",
    response_model=CourseDetailResponse,
    summary="Get course",
)
async def get_course(
    course_id: UUID,
    course_service: CourseServiceDep,
    user: OptionalUser,
) -> CourseDetailResponse:
    """Course with modules; ``is_enrolled`` reflects the caller, if any."""
    view = await course_service.get_course_view(
        course_id, user.id if user else None
    )
    return CourseDetailResponse.from_view(view)


@router.put(
    "/{course_id}",
    response_model=CourseDetailResponse,
    summary="Update course",
)
async def update_course(
    course_id: UUID,
    data: UpdateCourseRequest,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> CourseDetailResponse:
    course = await course_service.update_course(course_id, user.id, data)
    view = await course_service.view(course)
    return CourseDetailResponse.from_view(view)


@router.delete(
    "/{course_id}",
    response_model=MessageResponse,
    summary="Delete course",
)
async def delete_course(
    course_id: UUID,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> MessageResponse:
    await course_service.delete_course(course_id, user.id)
    return MessageResponse(message="Course deleted successfully")


# ==============================================================================
# Modules
# ==============================================================================


@router.post(
    "/{course_id}/modules",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add module",
)
async def add_module(
    course_id: UUID,
    data: ModuleRequest,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> ModuleResponse:
    module = await course_service.add_module(course_id, user.id, data)
    return ModuleResponse.model_validate(module)


@router.put(
    "/{course_id}/modules/{module_id}",
    response_model=ModuleResponse,
    summary="Update module",
)
async def update_module(
    course_id: UUID,
    module_id: UUID,
    data: UpdateModuleRequest,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> ModuleResponse:
    module = await course_service.update_module(course_id, module_id, user.id, data)
    return ModuleResponse.model_validate(module)


@router.delete(
    "/{course_id}/modules/{module_id}",
    response_model=MessageResponse,
    summary="Delete module",
)
async def delete_module(
    course_id: UUID,
    module_id: UUID,
    course_service: CourseServiceDep,
    user: InstructorUser,
) -> MessageResponse:
    await course_service.delete_module(course_id, module_id, user.id)
    return MessageResponse(message="Module deleted")
