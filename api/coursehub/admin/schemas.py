"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel

from coursehub.auth.permissions import InstructorStatus
from coursehub.auth.schemas import UserResponse


class StatsResponse(BaseModel):
    total_users: int
    total_courses: int
    total_students: int
    total_instructors: int


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class InstructorStatusResponse(BaseModel):
    """Result of approve/reject. ``changed`` is False for a no-op."""

    message: str
    user: UserResponse
    previous_status: InstructorStatus | None = None
    changed: bool
