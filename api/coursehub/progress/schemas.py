"""Pydantic schemas for enrollment and progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from coursehub.courses.schemas import CourseResponse


class EnrollmentResponse(BaseModel):
    message: str
    course_id: UUID
    user_id: UUID
    enrolled_at: datetime
    student_count: int
    already_enrolled: bool = False


class EnrolledCourseResponse(CourseResponse):
    enrolled_at: datetime


class EnrolledCourseListResponse(BaseModel):
    items: list[EnrolledCourseResponse]
    total: int


class CompleteModuleResponse(BaseModel):
    message: str
    course_id: UUID
    module_id: UUID
    completed_at: datetime
    already_completed: bool = False
    progress: int = Field(ge=0, le=100)


class CourseProgressResponse(BaseModel):
    course_id: UUID
    course_title: str
    total_modules: int
    completed_modules: list[UUID] = Field(default_factory=list)
    progress: int = Field(ge=0, le=100)


class ProgressListResponse(BaseModel):
    items: list[CourseProgressResponse]
    total: int
