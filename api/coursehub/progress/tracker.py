"""Module completion tracking and progress calculation.

Progress for a course is the share of its current modules the student has
completed, as an integer percentage rounded half up::

    progress = 0                               if total == 0
    progress = round_half_up(done / total * 100)  otherwise

Completions of modules that were later removed from the course are kept
but do not count.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.core.errors import (
    CourseModuleNotFoundError,
    CourseNotFoundError,
    UserNotFoundError,
)
from coursehub.progress.models import CompletedModule


if TYPE_CHECKING:
    from coursehub.auth.repository import UserRepository
    from coursehub.courses.models import Course
    from coursehub.courses.repository import CourseRepository, ModuleRepository
    from coursehub.progress.ledger import EnrollmentLedger
    from coursehub.progress.repository import CompletionRepository

logger = structlog.get_logger(__name__)


def compute_progress(completed: int, total: int) -> int:
    """Integer completion percentage, rounded half up.

    Examples:
        >>> compute_progress(2, 4)
        50
        >>> compute_progress(1, 3)
        33
        >>> compute_progress(2, 3)
        67
        >>> compute_progress(0, 0)
        0
    """
    if total <= 0:
        return 0
    ratio = Decimal(completed) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class ProgressReport:
    course_id: UUID
    course_title: str
    total_modules: int
    progress: int
    completed_modules: list[UUID] = field(default_factory=list)
    completions: list[CompletedModule] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.progress == 100

    @property
    def last_completed_at(self) -> datetime | None:
        if not self.completions:
            return None
        return max(c.completed_at for c in self.completions)


@dataclass
class CompletionResult:
    course_id: UUID
    module_id: UUID
    completed_at: datetime
    already_completed: bool
    progress: int


class ProgressTracker:
    """Record module completions and derive course progress."""

    def __init__(
        self,
        users: "UserRepository",
        courses: "CourseRepository",
        modules: "ModuleRepository",
        completions: "CompletionRepository",
        ledger: "EnrollmentLedger",
    ):
        self.users = users
        self.courses = courses
        self.modules = modules
        self.completions = completions
        self.ledger = ledger

    async def _load_course(self, course_id: UUID) -> "Course":
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        course.modules = await self.modules.list_for_course(course_id)
        return course

    async def complete_module(
        self, user_id: UUID, course_id: UUID, module_id: UUID
    ) -> CompletionResult:
        """Mark a module complete for a student.

        Completing the same module again returns the original record with
        ``already_completed`` set.

        Raises:
            UserNotFoundError: If the user does not exist
            CourseNotFoundError: If the course does not exist
            CourseModuleNotFoundError: If the module is not part of the course
            NotEnrolledError: If the user is not enrolled in the course
        """
        if await self.users.get_by_id(user_id) is None:
            raise UserNotFoundError
        course = await self._load_course(course_id)
        if not course.has_module(module_id):
            raise CourseModuleNotFoundError
        await self.ledger.require_enrollment(user_id, course_id)

        existing = await self.completions.get(user_id, course_id, module_id)
        already_completed = existing is not None

        if existing is None:
            completion = CompletedModule(
                user_id=user_id, course_id=course_id, module_id=module_id
            )
            if await self.completions.add_if_absent(completion):
                existing = completion
                logger.info(
                    "module_completed",
                    course_id=str(course_id),
                    module_id=str(module_id),
                    student_id=str(user_id),
                )
            else:
                # Lost an insert race; report the winner's record
                already_completed = True
                existing = await self.completions.get(user_id, course_id, module_id)
                if existing is None:
                    existing = completion

        report = await self._report(user_id, course)
        return CompletionResult(
            course_id=course_id,
            module_id=module_id,
            completed_at=existing.completed_at,
            already_completed=already_completed,
            progress=report.progress,
        )

    async def _report(self, user_id: UUID, course: "Course") -> ProgressReport:
        module_ids = {m.id for m in course.modules}
        completions = [
            c
            for c in await self.completions.list_for_course(user_id, course.id)
            if c.module_id in module_ids
        ]
        return ProgressReport(
            course_id=course.id,
            course_title=course.title,
            total_modules=len(course.modules),
            progress=compute_progress(len(completions), len(course.modules)),
            completed_modules=[c.module_id for c in completions],
            completions=completions,
        )

    async def get_progress(self, user_id: UUID, course_id: UUID) -> ProgressReport:
        """Progress of a user in one course.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self._load_course(course_id)
        return await self._report(user_id, course)

    async def get_progress_for_all_enrolled(self, user_id: UUID) -> list[ProgressReport]:
        """Progress across every enrolled course, evaluated concurrently."""
        course_ids = await self.ledger.list_enrolled_course_ids(user_id)
        reports = await asyncio.gather(
            *(self._report_if_exists(user_id, course_id) for course_id in course_ids)
        )
        return [r for r in reports if r is not None]

    async def _report_if_exists(
        self, user_id: UUID, course_id: UUID
    ) -> ProgressReport | None:
        try:
            return await self.get_progress(user_id, course_id)
        except CourseNotFoundError:
            return None

    async def list_completed(self, user_id: UUID) -> list[CompletedModule]:
        """All completion records of a user across enrolled courses."""
        course_ids = await self.ledger.list_enrolled_course_ids(user_id)
        per_course = await asyncio.gather(
            *(self.completions.list_for_course(user_id, cid) for cid in course_ids)
        )
        return [c for completions in per_course for c in completions]
