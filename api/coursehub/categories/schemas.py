"""Pydantic schemas for categories."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryRequest(BaseModel):
    """Category create/rename request."""

    name: str = Field(..., min_length=2, max_length=80, description="Category name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            msg = "Category name must be at least 2 characters"
            raise ValueError(msg)
        return v


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime | None = None


class CategoryListResponse(BaseModel):
    items: list[CategoryResponse]
    total: int
