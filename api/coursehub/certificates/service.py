"""Course completion certificates.

A certificate is computed on request from membership and progress; it is
never stored.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.core.errors import CourseNotFoundError, ForbiddenError, UserNotFoundError
from coursehub.core.timestamps import utcnow


if TYPE_CHECKING:
    from coursehub.auth.repository import UserRepository
    from coursehub.courses.repository import CourseRepository
    from coursehub.progress.ledger import EnrollmentLedger
    from coursehub.progress.tracker import ProgressTracker

logger = structlog.get_logger(__name__)


class CourseNotCompletedError(ForbiddenError):
    def __init__(self, message: str = "Course not completed"):
        super().__init__(message, "course_not_completed")


@dataclass
class Certificate:
    course_id: UUID
    student_id: UUID
    student_name: str
    course_title: str
    instructor_name: str
    completed_at: datetime
    last_module_completed_at: datetime | None


class CertificateEvaluator:
    """Issue certificates for fully completed courses."""

    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        ledger: "EnrollmentLedger",
        tracker: "ProgressTracker",
    ):
        self.users = users
        self.courses = courses
        self.ledger = ledger
        self.tracker = tracker

    async def issue(self, user_id: UUID, course_id: UUID) -> Certificate:
        """Build the certificate payload.

        ``completed_at`` is the time of the request;
        ``last_module_completed_at`` is when the last module was completed.

        Raises:
            CourseNotFoundError: If the course does not exist
            UserNotFoundError: If the user does not exist
            NotEnrolledError: If the user is not enrolled
            CourseNotCompletedError: If progress is below 100
        """
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        student = await self.users.get_by_id(user_id)
        if student is None:
            raise UserNotFoundError

        await self.ledger.require_enrollment(user_id, course_id)

        report = await self.tracker.get_progress(user_id, course_id)
        if not report.is_complete:
            raise CourseNotCompletedError

        certificate = Certificate(
            course_id=course.id,
            student_id=student.id,
            student_name=student.name,
            course_title=course.title,
            instructor_name=await self.ledger.instructor_name(course.instructor_id),
            completed_at=utcnow(),
            last_module_completed_at=report.last_completed_at,
        )
        logger.info("certificate_issued", course_id=str(course_id))
        return certificate
