"""Authentication module.

Provides:
- Registration and login with Argon2 password hashing
- JWT access tokens carrying the user's role
- Instructor approval lifecycle gating login
- Role-based access control dependencies
"""

from coursehub.auth.models import AUTH_TABLES_CQL, User
from coursehub.auth.permissions import InstructorStatus, UserRole


__all__ = [
    "AUTH_TABLES_CQL",
    "InstructorStatus",
    "User",
    "UserRole",
]
