"""FastAPI dependencies for course endpoints."""

from typing import Annotated

from fastapi import Depends

from coursehub.core.dependencies import ServiceSlot
from coursehub.courses.service import CourseService


get_course_service = ServiceSlot[CourseService]("CourseService")
set_course_service_getter = get_course_service.set_getter

CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]
