"""Pydantic schemas for authentication.

Request and response models for:
- User registration and login
- Token responses
- User profile
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from coursehub.auth.models import User
from coursehub.auth.permissions import InstructorStatus, UserRole


# ==============================================================================
# Request Schemas
# ==============================================================================


class RegisterRequest(BaseModel):
    """User registration request.

    Admin accounts cannot be self-registered.
    """

    name: str = Field(..., min_length=2, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    role: Literal["student", "instructor"] = Field(
        default="student", description="Requested role"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")


# ==============================================================================
# Response Schemas
# ==============================================================================


class UserResponse(BaseModel):
    """Public user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: UserRole
    instructor_status: InstructorStatus | None = None
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=UserRole(user.role),
            instructor_status=(
                InstructorStatus(user.instructor_status)
                if user.instructor_status
                else None
            ),
            created_at=user.created_at,
        )


class TokenUser(BaseModel):
    """Identity extracted from a verified access token."""

    id: UUID
    email: str = ""
    role: UserRole


class RegisterResponse(BaseModel):
    """Registration result."""

    message: str
    user: UserResponse


class TokenResponse(BaseModel):
    """Login result with bearer access token."""

    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserResponse


class CompletedModuleResponse(BaseModel):
    course_id: UUID
    module_id: UUID
    completed_at: datetime


class MeResponse(UserResponse):
    """Profile of the authenticated user with learning state."""

    enrolled_courses: list[UUID] = Field(default_factory=list)
    completed_modules: list[CompletedModuleResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
