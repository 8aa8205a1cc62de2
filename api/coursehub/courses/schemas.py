"""Pydantic schemas for courses and modules."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from coursehub.courses.models import Course


if TYPE_CHECKING:
    from coursehub.auth.models import User
    from coursehub.courses.service import CourseView


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Course creation request.

    The category can be given by id or by name; an unknown name is rejected.
    """

    title: str = Field(..., min_length=3, max_length=200, description="Course title")
    description: str = Field("", max_length=5000, description="Course description")
    price: Decimal = Field(Decimal(0), ge=0, description="Course price")
    thumbnail_url: str | None = Field(
        None, max_length=500, description="Thumbnail reference"
    )
    category_id: UUID | None = Field(None, description="Category id")
    category: str | None = Field(None, max_length=80, description="Category name")


class UpdateCourseRequest(BaseModel):
    """Course update request. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, max_length=5000)
    price: Decimal | None = Field(None, ge=0)
    thumbnail_url: str | None = Field(None, max_length=500)
    category_id: UUID | None = None
    category: str | None = Field(None, max_length=80)


class ModuleRequest(BaseModel):
    """Module create request."""

    title: str = Field(..., min_length=1, max_length=200, description="Module title")
    video_url: str | None = Field(None, max_length=500)
    pdf_url: str | None = Field(None, max_length=500)


class UpdateModuleRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    video_url: str | None = Field(None, max_length=500)
    pdf_url: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_not_empty(self) -> Self:
        if self.title is None and self.video_url is None and self.pdf_url is None:
            msg = "At least one field must be provided"
            raise ValueError(msg)
        return self


class ModuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    video_url: str | None = None
    pdf_url: str | None = None
    position: int


class StudentSummary(BaseModel):
    id: UUID
    name: str
    email: str

    @classmethod
    def from_user(cls, user: "User") -> "StudentSummary":
        return cls(id=user.id, name=user.name, email=user.email)


class CourseResponse(BaseModel):
    """Course with derived rating fields."""

    id: UUID
    title: str
    description: str = ""
    price: Decimal
    thumbnail_url: str | None = None
    category_id: UUID | None = None
    category_name: str | None = None
    instructor_id: UUID
    instructor_name: str | None = None
    avg_rating: float = 0.0
    review_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_course(
        cls,
        course: Course,
        instructor_name: str | None = None,
        category_name: str | None = None,
    ) -> Self:
        return cls(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            thumbnail_url=course.thumbnail_url,
            category_id=course.category_id,
            category_name=category_name,
            instructor_id=course.instructor_id,
            instructor_name=instructor_name,
            avg_rating=course.avg_rating,
            review_count=course.review_count,
            created_at=course.created_at,
            updated_at=course.updated_at,
        )

    @classmethod
    def from_view(cls, view: "CourseView") -> Self:
        return cls.from_course(view.course, view.instructor_name, view.category_name)


class CourseDetailResponse(CourseResponse):
    modules: list[ModuleResponse] = Field(default_factory=list)
    student_count: int = 0
    is_enrolled: bool = False

    @classmethod
    def from_view(cls, view: "CourseView") -> Self:
        response = super().from_view(view)
        response.modules = [ModuleResponse.model_validate(m) for m in view.course.modules]
        response.student_count = view.student_count
        response.is_enrolled = view.is_enrolled
        return response


class CourseListResponse(BaseModel):
    items: list[CourseResponse]
    total: int


class InstructorCourseResponse(CourseDetailResponse):
    """An instructor's own course, with its students."""

    students: list[StudentSummary] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: "CourseView") -> Self:
        response = super().from_view(view)
        response.students = [StudentSummary.from_user(u) for u in view.students]
        return response


class InstructorCourseListResponse(BaseModel):
    items: list[InstructorCourseResponse]
    total: int


class InstructorProfileResponse(BaseModel):
    id: UUID
    name: str
    email: str
    courses: list[CourseResponse]
    total_courses: int
    total_students: int
