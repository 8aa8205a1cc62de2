"""Pydantic schemas for certificates."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    student_id: UUID
    student_name: str
    course_title: str
    instructor_name: str
    completed_at: datetime
    last_module_completed_at: datetime | None = None
