"""Admin service layer.

Platform statistics, user management and course moderation. Review
moderation and instructor approval live in their own services and are
exposed through the admin router.
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.auth.permissions import UserRole
from coursehub.core.errors import ForbiddenError, InvalidInputError, UserNotFoundError


if TYPE_CHECKING:
    from coursehub.auth.models import User
    from coursehub.auth.repository import UserRepository
    from coursehub.courses.repository import CourseRepository
    from coursehub.courses.service import CourseService, CourseView
    from coursehub.progress.repository import CompletionRepository, EnrollmentRepository

logger = structlog.get_logger(__name__)


class CannotDeleteSelfError(InvalidInputError):
    def __init__(self, message: str = "You cannot delete yourself"):
        super().__init__(message, "cannot_delete_self")


class CannotDeleteAdminError(ForbiddenError):
    def __init__(self, message: str = "Cannot delete another admin"):
        super().__init__(message, "cannot_delete_admin")


@dataclass
class PlatformStats:
    total_users: int
    total_courses: int
    total_students: int
    total_instructors: int


class AdminService:
    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        enrollments: "EnrollmentRepository",
        completions: "CompletionRepository",
        course_service: "CourseService",
    ):
        self.users = users
        self.courses = courses
        self.enrollments = enrollments
        self.completions = completions
        self.course_service = course_service

    async def stats(self) -> PlatformStats:
        total_users, total_courses, total_students, total_instructors = (
            await asyncio.gather(
                self.users.count(),
                self.courses.count(),
                self.users.count(UserRole.STUDENT.value),
                self.users.count(UserRole.INSTRUCTOR.value),
            )
        )
        return PlatformStats(
            total_users=total_users,
            total_courses=total_courses,
            total_students=total_students,
            total_instructors=total_instructors,
        )

    async def list_users(self) -> list["User"]:
        users = await self.users.list_all()
        return sorted(users, key=lambda u: u.created_at, reverse=True)

    async def delete_user(self, actor_id: UUID, user_id: UUID) -> None:
        """Delete a non-admin account and all of its enrollments.

        Reviews the user wrote stay in place so course ratings are unchanged.

        Raises:
            CannotDeleteSelfError: If an admin targets their own account
            UserNotFoundError: If the user does not exist
            CannotDeleteAdminError: If the target is an admin
        """
        if actor_id == user_id:
            raise CannotDeleteSelfError

        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        if user.role == UserRole.ADMIN.value:
            raise CannotDeleteAdminError

        removed = await self.enrollments.remove_user(user.id)
        await asyncio.gather(
            *(self.completions.delete_for_course(user.id, e.course_id) for e in removed)
        )
        await self.users.delete(user.id)

        logger.info(
            "user_deleted",
            deleted_user_id=str(user.id),
            role=user.role,
            removed_enrollments=len(removed),
        )

    async def list_courses(self) -> list["CourseView"]:
        return await self.course_service.list_courses()

    async def delete_course(self, course_id: UUID) -> None:
        course = await self.course_service.get_course(course_id, with_modules=False)
        await self.course_service.remove_course(course)
