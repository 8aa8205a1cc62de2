"""Typed application errors shared by every module.

Each service raises a subclass of AppError carrying a machine-readable
``code`` and an ErrorKind. The HTTP layer maps the kind to a status code;
services never deal with HTTP.
"""

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """Failure taxonomy exposed to the HTTP adapter."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INTERNAL = "internal"


ERROR_STATUS_MAP: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.kind.value
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP[self.kind]


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN


class InvalidInputError(AppError):
    kind = ErrorKind.VALIDATION


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class InternalError(AppError):
    kind = ErrorKind.INTERNAL


# ==============================================================================
# Lookups shared across modules
# ==============================================================================


class CourseNotFoundError(NotFoundError):
    """Course does not exist."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class UserNotFoundError(NotFoundError):
    """User does not exist."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


class CourseModuleNotFoundError(NotFoundError):
    """Module does not belong to the course."""

    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "module_not_found")


class NotEnrolledError(ForbiddenError):
    """Caller is not a student of the course."""

    def __init__(self, message: str = "Not enrolled in this course"):
        super().__init__(message, "not_enrolled")
