"""Course management service layer.

Business logic for:
- Course creation by approved instructors, editing and deletion by owners
- Module management within a course
- Course views with instructor, category and membership details
- Instructor profiles

Deleting a course cascades to its modules, reviews, completions and both
sides of every enrollment.
"""

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.core.errors import (
    CourseModuleNotFoundError,
    CourseNotFoundError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UserNotFoundError,
)
from coursehub.core.timestamps import utcnow
from coursehub.courses.models import Course, Module
from coursehub.courses.schemas import (
    CreateCourseRequest,
    ModuleRequest,
    UpdateCourseRequest,
    UpdateModuleRequest,
)


if TYPE_CHECKING:
    from coursehub.auth.models import User
    from coursehub.auth.repository import UserRepository
    from coursehub.categories.repository import CategoryRepository
    from coursehub.courses.repository import CourseRepository, ModuleRepository
    from coursehub.progress.ledger import EnrollmentLedger
    from coursehub.progress.repository import CompletionRepository, EnrollmentRepository
    from coursehub.reviews.repository import ReviewRepository

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class NotCourseOwnerError(ForbiddenError):
    def __init__(self, message: str = "You do not own this course"):
        super().__init__(message, "not_course_owner")


class InstructorNotApprovedError(ForbiddenError):
    def __init__(self, message: str = "Only approved instructors can create courses"):
        super().__init__(message, "instructor_not_approved")


class UnknownCategoryError(InvalidInputError):
    def __init__(self, message: str = "Unknown category"):
        super().__init__(message, "unknown_category")


class InstructorNotFoundError(NotFoundError):
    def __init__(self, message: str = "Instructor not found"):
        super().__init__(message, "instructor_not_found")


# ==============================================================================
# Views
# ==============================================================================


@dataclass
class CourseView:
    """A course with the names and counts its responses need."""

    course: Course
    instructor_name: str | None = None
    category_name: str | None = None
    student_count: int = 0
    is_enrolled: bool = False
    students: list["User"] = field(default_factory=list)


@dataclass
class InstructorProfile:
    instructor: "User"
    courses: list[CourseView]
    total_students: int


# ==============================================================================
# Course Service
# ==============================================================================


class CourseService:
    """Courses and their modules."""

    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        modules: "ModuleRepository",
        categories: "CategoryRepository",
        enrollments: "EnrollmentRepository",
        completions: "CompletionRepository",
        reviews: "ReviewRepository",
        ledger: "EnrollmentLedger",
    ):
        self.users = users
        self.courses = courses
        self.modules = modules
        self.categories = categories
        self.enrollments = enrollments
        self.completions = completions
        self.reviews = reviews
        self.ledger = ledger

    # --------------------------------------------------------------------------
    # Lookups
    # --------------------------------------------------------------------------

    async def get_course(self, course_id: UUID, with_modules: bool = True) -> Course:
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        if with_modules:
            course.modules = await self.modules.list_for_course(course_id)
        return course

    async def _owned_course(self, course_id: UUID, actor_id: UUID) -> Course:
        course = await self.get_course(course_id)
        if course.instructor_id != actor_id:
            raise NotCourseOwnerError
        return course

    async def _resolve_category(
        self, category_id: UUID | None, category_name: str | None
    ) -> UUID | None:
        if category_id is not None:
            if await self.categories.get(category_id) is None:
                raise UnknownCategoryError
            return category_id
        if category_name:
            category = await self.categories.get_by_name(category_name)
            if category is None:
                raise UnknownCategoryError(f"Unknown category: {category_name}")
            return category.id
        return None

    async def _category_name(self, category_id: UUID | None) -> str | None:
        if category_id is None:
            return None
        category = await self.categories.get(category_id)
        return category.name if category else None

    async def view(self, course: Course, viewer_id: UUID | None = None) -> CourseView:
        instructor_name, category_name, student_count = await asyncio.gather(
            self.ledger.instructor_name(course.instructor_id),
            self._category_name(course.category_id),
            self.enrollments.count_students(course.id),
        )
        is_enrolled = False
        if viewer_id is not None:
            is_enrolled = await self.ledger.is_enrolled(viewer_id, course.id)
        return CourseView(
            course=course,
            instructor_name=instructor_name,
            category_name=category_name,
            student_count=student_count,
            is_enrolled=is_enrolled,
        )

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------

    async def get_course_view(
        self, course_id: UUID, viewer_id: UUID | None = None
    ) -> CourseView:
        """Single course with modules and the caller's membership flag."""
        course = await self.get_course(course_id)
        return await self.view(course, viewer_id)

    async def list_courses(self, category_id: UUID | None = None) -> list[CourseView]:
        """All courses, newest first, optionally filtered by category."""
        courses = await self.courses.list_all(category_id)
        courses.sort(key=lambda c: c.created_at, reverse=True)
        return list(await asyncio.gather(*(self.view(c) for c in courses)))

    async def list_instructor_courses(self, instructor_id: UUID) -> list[CourseView]:
        """Courses owned by an instructor, with modules and students."""
        courses = await self.courses.list_by_instructor(instructor_id)
        courses.sort(key=lambda c: c.created_at, reverse=True)

        views = []
        for course in courses:
            course.modules = await self.modules.list_for_course(course.id)
            view = await self.view(course)
            view.students = await self.ledger.list_students(course.id)
            views.append(view)
        return views

    async def instructor_profile(self, instructor_id: UUID) -> InstructorProfile:
        """Public profile: an instructor's courses and total students.

        Raises:
            InstructorNotFoundError: If the user is absent or not an instructor
        """
        instructor = await self.users.get_by_id(instructor_id)
        if instructor is None or not instructor.is_instructor:
            raise InstructorNotFoundError

        courses = await self.courses.list_by_instructor(instructor_id)
        courses.sort(key=lambda c: c.created_at, reverse=True)
        views = list(await asyncio.gather(*(self.view(c) for c in courses)))
        return InstructorProfile(
            instructor=instructor,
            courses=views,
            total_students=sum(v.student_count for v in views),
        )

    # --------------------------------------------------------------------------
    # Course Commands
    # --------------------------------------------------------------------------

    async def create_course(
        self, instructor_id: UUID, data: CreateCourseRequest
    ) -> Course:
        """Create a course owned by the calling instructor.

        Raises:
            UserNotFoundError: If the caller no longer exists
            InstructorNotApprovedError: If the caller is not an approved instructor
            UnknownCategoryError: If the category cannot be resolved
        """
        instructor = await self.users.get_by_id(instructor_id)
        if instructor is None:
            raise UserNotFoundError
        if not instructor.is_approved_instructor:
            raise InstructorNotApprovedError

        course = Course(
            instructor_id=instructor_id,
            title=data.title.strip(),
            description=data.description,
            price=data.price,
            thumbnail_url=data.thumbnail_url,
            category_id=await self._resolve_category(data.category_id, data.category),
        )
        await self.courses.insert(course)

        logger.info("course_created", course_id=str(course.id), title=course.title)
        return course

    async def update_course(
        self, course_id: UUID, actor_id: UUID, data: UpdateCourseRequest
    ) -> Course:
        """Edit course details (owner only)."""
        course = await self._owned_course(course_id, actor_id)

        if data.title is not None:
            course.title = data.title.strip()
        if data.description is not None:
            course.description = data.description
        if data.price is not None:
            course.price = data.price
        if data.thumbnail_url is not None:
            course.thumbnail_url = data.thumbnail_url
        if data.category_id is not None or data.category:
            course.category_id = await self._resolve_category(
                data.category_id, data.category
            )

        course.updated_at = utcnow()
        await self.courses.update_details(course)

        logger.info("course_updated", course_id=str(course.id))
        return course

    async def delete_course(self, course_id: UUID, actor_id: UUID) -> None:
        """Delete a course (owner only)."""
        course = await self._owned_course(course_id, actor_id)
        await self.remove_course(course)

    async def remove_course(self, course: Course) -> None:
        """Delete a course and everything hanging off it."""
        removed = await self.enrollments.remove_course(course.id)
        await asyncio.gather(
            *(self.completions.delete_for_course(e.user_id, course.id) for e in removed)
        )
        await self.reviews.delete_all(course.id)
        await self.modules.delete_all(course.id)
        await self.courses.delete(course.id)

        logger.info(
            "course_deleted",
            course_id=str(course.id),
            removed_enrollments=len(removed),
        )

    # --------------------------------------------------------------------------
    # Module Commands
    # --------------------------------------------------------------------------

    async def add_module(
        self, course_id: UUID, actor_id: UUID, data: ModuleRequest
    ) -> Module:
        """Append a module to the end of the course (owner only)."""
        course = await self._owned_course(course_id, actor_id)
        position = max((m.position for m in course.modules), default=0) + 1

        module = Module(
            course_id=course.id,
            title=data.title.strip(),
            video_url=data.video_url,
            pdf_url=data.pdf_url,
            position=position,
        )
        await self.modules.save(module)

        logger.info(
            "module_added",
            course_id=str(course.id),
            module_id=str(module.id),
            position=position,
        )
        return module

    async def update_module(
        self,
        course_id: UUID,
        module_id: UUID,
        actor_id: UUID,
        data: UpdateModuleRequest,
    ) -> Module:
        """Edit a module (owner only)."""
        course = await self._owned_course(course_id, actor_id)
        module = course.get_module(module_id)
        if module is None:
            raise CourseModuleNotFoundError

        if data.title is not None:
            module.title = data.title.strip()
        if data.video_url is not None:
            module.video_url = data.video_url
        if data.pdf_url is not None:
            module.pdf_url = data.pdf_url
        module.updated_at = utcnow()
        await self.modules.save(module)

        logger.info("module_updated", course_id=str(course.id), module_id=str(module_id))
        return module

    async def delete_module(
        self, course_id: UUID, module_id: UUID, actor_id: UUID
    ) -> None:
        """Remove a module (owner only). Existing completions stop counting."""
        course = await self._owned_course(course_id, actor_id)
        module = course.get_module(module_id)
        if module is None:
            raise CourseModuleNotFoundError

        await self.modules.delete(module)
        logger.info("module_deleted", course_id=str(course.id), module_id=str(module_id))
