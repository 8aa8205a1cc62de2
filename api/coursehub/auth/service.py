"""Authentication service layer.

Business logic for:
- User registration (instructors start pending)
- Login gated by the instructor approval lifecycle
- Access token issuance
- Bootstrap admin account
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursehub.auth.approval import check_login_allowed, initial_status
from coursehub.auth.models import User
from coursehub.auth.permissions import UserRole
from coursehub.auth.schemas import RegisterRequest, UserResponse
from coursehub.auth.security import create_access_token, hash_password, verify_password
from coursehub.config.settings import get_settings
from coursehub.core.errors import ConflictError, UnauthorizedError, UserNotFoundError
from coursehub.core.timestamps import utcnow


if TYPE_CHECKING:
    from coursehub.auth.repository import UserRepository

logger = structlog.get_logger(__name__)


class InvalidCredentialsError(UnauthorizedError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, "invalid_credentials")


class UserExistsError(ConflictError):
    """Email already registered."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message, "user_exists")


class AuthService:
    """Registration, login and token issuance."""

    def __init__(self, users: "UserRepository"):
        self.users = users

    async def get_user(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        return user

    async def register_user(self, data: RegisterRequest) -> User:
        """Register a new student or instructor.

        Raises:
            UserExistsError: If email already exists
        """
        if await self.users.get_by_email(data.email):
            raise UserExistsError

        user = User(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password),
            role=data.role,
            instructor_status=initial_status(data.role),
        )
        await self.users.insert(user)

        logger.info(
            "user_registered",
            new_user_id=str(user.id),
            role=user.role,
            instructor_status=user.instructor_status,
        )
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """Authenticate user with email and password.

        Credentials are checked before the approval gate, so a pending or
        rejected instructor only learns their status with a valid password.

        Raises:
            InvalidCredentialsError: If email or password is wrong
            InstructorPendingError: Instructor not yet reviewed
            InstructorRejectedError: Instructor rejected by admin
        """
        user = await self.users.get_by_email(email)
        if user is None:
            raise InvalidCredentialsError

        is_valid, new_hash = verify_password(password, user.password_hash)
        if not is_valid:
            raise InvalidCredentialsError

        check_login_allowed(user)

        if new_hash:
            await self.users.update_password(user.id, new_hash, utcnow())
            user.password_hash = new_hash

        logger.info("user_logged_in", login_user_id=str(user.id), role=user.role)
        return user

    def issue_token(self, user: User) -> tuple[str, int]:
        """Create an access token bound to the user's id and role.

        Returns:
            Tuple of (token, lifetime in seconds)
        """
        settings = get_settings()
        token = create_access_token(
            {"sub": str(user.id), "email": user.email, "role": user.role}
        )
        return token, settings.auth_access_token_expire_minutes * 60

    async def ensure_admin(self, email: str, password: str, name: str) -> User:
        """Create the bootstrap admin unless the email is already taken."""
        existing = await self.users.get_by_email(email)
        if existing:
            return existing

        admin = User(
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
        )
        await self.users.insert(admin)
        logger.info("bootstrap_admin_created", admin_id=str(admin.id))
        return admin

    @staticmethod
    def to_response(user: User) -> UserResponse:
        return UserResponse.from_user(user)
