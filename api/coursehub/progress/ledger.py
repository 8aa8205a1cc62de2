"""Enrollment ledger.

Membership of students in courses, kept as two views (by course and by
user) that are only ever written together.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.core.errors import CourseNotFoundError, NotEnrolledError, UserNotFoundError
from coursehub.progress.models import Enrollment


if TYPE_CHECKING:
    from coursehub.auth.models import User
    from coursehub.auth.repository import UserRepository
    from coursehub.courses.models import Course
    from coursehub.courses.repository import CourseRepository
    from coursehub.progress.repository import EnrollmentRepository

logger = structlog.get_logger(__name__)

FALLBACK_INSTRUCTOR_NAME = "Instructor"


@dataclass
class EnrollmentResult:
    """Membership view returned by ``enroll``."""

    course_id: UUID
    user_id: UUID
    enrolled_at: datetime
    student_count: int
    already_enrolled: bool


@dataclass
class EnrolledCourse:
    course: "Course"
    instructor_name: str
    enrolled_at: datetime


class EnrollmentLedger:
    """Enroll students and answer membership questions."""

    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        enrollments: "EnrollmentRepository",
    ):
        self.users = users
        self.courses = courses
        self.enrollments = enrollments

    async def enroll(self, user_id: UUID, course_id: UUID) -> EnrollmentResult:
        """Add a student to a course.

        Enrolling twice is a no-op that reports ``already_enrolled``.

        Raises:
            CourseNotFoundError: If the course does not exist
            UserNotFoundError: If the user does not exist
        """
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        if await self.users.get_by_id(user_id) is None:
            raise UserNotFoundError

        existing = await self.enrollments.get(user_id, course_id)
        if existing is not None:
            return EnrollmentResult(
                course_id=course_id,
                user_id=user_id,
                enrolled_at=existing.enrolled_at,
                student_count=await self.enrollments.count_students(course_id),
                already_enrolled=True,
            )

        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        await self.enrollments.add(enrollment)

        logger.info("user_enrolled", course_id=str(course_id), student_id=str(user_id))
        return EnrollmentResult(
            course_id=course_id,
            user_id=user_id,
            enrolled_at=enrollment.enrolled_at,
            student_count=await self.enrollments.count_students(course_id),
            already_enrolled=False,
        )

    async def is_enrolled(self, user_id: UUID, course_id: UUID) -> bool:
        return await self.enrollments.get(user_id, course_id) is not None

    async def require_enrollment(
        self,
        user_id: UUID,
        course_id: UUID,
        message: str = "Not enrolled in this course",
    ) -> Enrollment:
        """Return the membership or raise NotEnrolledError."""
        enrollment = await self.enrollments.get(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError(message)
        return enrollment

    async def list_enrolled_course_ids(self, user_id: UUID) -> list[UUID]:
        return [e.course_id for e in await self.enrollments.list_courses(user_id)]

    async def list_enrolled_courses(self, user_id: UUID) -> list[EnrolledCourse]:
        """Courses the user is a student of, with their instructor's name."""
        enrollments = await self.enrollments.list_courses(user_id)
        courses = await asyncio.gather(
            *(self.courses.get(e.course_id) for e in enrollments)
        )

        result = []
        for enrollment, course in zip(enrollments, courses, strict=True):
            if course is None:
                continue
            result.append(
                EnrolledCourse(
                    course=course,
                    instructor_name=await self.instructor_name(course.instructor_id),
                    enrolled_at=enrollment.enrolled_at,
                )
            )
        return result

    async def list_students(self, course_id: UUID) -> list["User"]:
        enrollments = await self.enrollments.list_students(course_id)
        users = await asyncio.gather(
            *(self.users.get_by_id(e.user_id) for e in enrollments)
        )
        return [u for u in users if u is not None]

    async def instructor_name(self, instructor_id: UUID) -> str:
        instructor = await self.users.get_by_id(instructor_id)
        return instructor.name if instructor else FALLBACK_INSTRUCTOR_NAME
