"""Roles and instructor account status.

Roles are flat (no hierarchy): each endpoint names the roles it accepts.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class InstructorStatus(str, Enum):
    """Lifecycle of an instructor account (null for other roles)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Roles a visitor may pick at self-registration
SELF_REGISTRATION_ROLES = frozenset({UserRole.STUDENT, UserRole.INSTRUCTOR})


def _coerce(role: UserRole | str) -> UserRole | None:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def has_role(role: UserRole | str, *allowed: UserRole) -> bool:
    """Check whether ``role`` is one of ``allowed``.

    Examples:
        >>> has_role("admin", UserRole.ADMIN)
        True
        >>> has_role(UserRole.STUDENT, UserRole.INSTRUCTOR, UserRole.ADMIN)
        False
        >>> has_role("superuser", UserRole.ADMIN)
        False
    """
    return _coerce(role) in allowed


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    return has_role(role, UserRole.ADMIN)


def is_instructor(role: UserRole | str) -> bool:
    """Check if role is INSTRUCTOR."""
    return has_role(role, UserRole.INSTRUCTOR)


def is_student(role: UserRole | str) -> bool:
    """Check if role is STUDENT."""
    return has_role(role, UserRole.STUDENT)
