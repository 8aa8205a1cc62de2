"""Enrollment and progress module.

Provides:
- Enrollment ledger (course-side and user-side membership)
- Module completion tracking
- Progress percentage per course
"""

from coursehub.progress.models import (
    PROGRESS_TABLES_CQL,
    CompletedModule,
    Enrollment,
)


__all__ = [
    "PROGRESS_TABLES_CQL",
    "CompletedModule",
    "Enrollment",
]
