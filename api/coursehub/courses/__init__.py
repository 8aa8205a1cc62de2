"""Course management module.

Provides:
- Course CRUD for approved instructors
- Ordered modules per course
- Instructor profiles
"""

from coursehub.courses.models import COURSES_TABLES_CQL, Course, Module


__all__ = [
    "COURSES_TABLES_CQL",
    "Course",
    "Module",
]
