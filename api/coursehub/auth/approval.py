"""Instructor approval lifecycle.

States and admin transitions::

    pending  --approve--> approved
    pending  --reject---> rejected
    rejected --approve--> approved
    approved --reject---> rejected

A transition into the current state is a no-op that still succeeds.
Only registration puts an account into ``pending``. The status is
meaningful only for instructors; other roles always carry ``None``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.auth.models import User
from coursehub.auth.permissions import InstructorStatus, UserRole
from coursehub.core.errors import (
    ForbiddenError,
    InvalidInputError,
    UserNotFoundError,
)
from coursehub.core.timestamps import utcnow


if TYPE_CHECKING:
    from coursehub.auth.repository import UserRepository

logger = structlog.get_logger(__name__)


ALLOWED_TRANSITIONS: dict[InstructorStatus, frozenset[InstructorStatus]] = {
    InstructorStatus.PENDING: frozenset(
        {InstructorStatus.APPROVED, InstructorStatus.REJECTED}
    ),
    InstructorStatus.REJECTED: frozenset({InstructorStatus.APPROVED}),
    InstructorStatus.APPROVED: frozenset({InstructorStatus.REJECTED}),
}


class InstructorPendingError(ForbiddenError):
    def __init__(self, message: str = "Instructor account pending admin approval"):
        super().__init__(message, "instructor_pending")


class InstructorRejectedError(ForbiddenError):
    def __init__(self, message: str = "Instructor account was rejected by admin"):
        super().__init__(message, "instructor_rejected")


class NotAnInstructorError(InvalidInputError):
    def __init__(self, message: str = "User is not an instructor"):
        super().__init__(message, "not_an_instructor")


class InvalidTransitionError(InvalidInputError):
    def __init__(self, current: str | None, target: str):
        super().__init__(
            f"Cannot move instructor status from {current} to {target}",
            "invalid_status_transition",
        )


@dataclass
class StatusChange:
    """Outcome of an approve/reject call."""

    user: User
    previous_status: str | None
    changed: bool


def initial_status(role: UserRole | str) -> str | None:
    """Status assigned at registration: pending for instructors, else None."""
    if UserRole(role) == UserRole.INSTRUCTOR:
        return InstructorStatus.PENDING.value
    return None


def can_transition(current: str | None, target: InstructorStatus) -> bool:
    """Check whether the machine permits ``current -> target``.

    Examples:
        >>> can_transition("pending", InstructorStatus.APPROVED)
        True
        >>> can_transition("approved", InstructorStatus.APPROVED)
        True
        >>> can_transition("rejected", InstructorStatus.PENDING)
        False
    """
    if current is None:
        return False
    source = InstructorStatus(current)
    return source == target or target in ALLOWED_TRANSITIONS[source]


def check_login_allowed(user: User) -> None:
    """Gate authentication on instructor status.

    Raises:
        InstructorPendingError: instructor still awaiting review
        InstructorRejectedError: instructor rejected by an admin
    """
    if not user.is_instructor:
        return
    if user.instructor_status == InstructorStatus.APPROVED.value:
        return
    if user.instructor_status == InstructorStatus.REJECTED.value:
        raise InstructorRejectedError
    raise InstructorPendingError


class InstructorApprovalService:
    """Admin-driven transitions of instructor accounts."""

    def __init__(self, users: "UserRepository"):
        self.users = users

    async def approve(self, user_id: UUID) -> StatusChange:
        return await self._transition(user_id, InstructorStatus.APPROVED)

    async def reject(self, user_id: UUID) -> StatusChange:
        return await self._transition(user_id, InstructorStatus.REJECTED)

    async def list_pending(self) -> list[User]:
        pending = await self.users.list_by_instructor_status(
            InstructorStatus.PENDING.value
        )
        return [u for u in pending if u.is_instructor]

    async def _transition(
        self, user_id: UUID, target: InstructorStatus
    ) -> StatusChange:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        if not user.is_instructor:
            raise NotAnInstructorError

        previous = user.instructor_status
        if previous == target.value:
            return StatusChange(user=user, previous_status=previous, changed=False)

        # Accounts created before statuses existed are treated as pending
        current = previous or InstructorStatus.PENDING.value
        if not can_transition(current, target):
            raise InvalidTransitionError(previous, target.value)

        now = utcnow()
        await self.users.update_instructor_status(user.id, target.value, now)
        user.instructor_status = target.value
        user.updated_at = now

        logger.info(
            f"instructor_{target.value}",
            instructor_id=str(user.id),
            previous_status=previous,
        )
        return StatusChange(user=user, previous_status=previous, changed=True)
