"""Request authentication and role gates.

The caller's identity comes from the bearer token alone; routes that need
the stored account (approval status, profile) load it through a service.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from coursehub.auth.approval import InstructorApprovalService
from coursehub.auth.permissions import UserRole, has_role
from coursehub.auth.schemas import TokenUser
from coursehub.auth.security import decode_access_token
from coursehub.auth.service import AuthService
from coursehub.core.context import set_user_id
from coursehub.core.dependencies import ServiceSlot


get_auth_service = ServiceSlot[AuthService]("AuthService")
set_auth_service_getter = get_auth_service.set_getter

get_approval_service = ServiceSlot[InstructorApprovalService]("InstructorApprovalService")
set_approval_service_getter = get_approval_service.set_getter

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ApprovalServiceDep = Annotated[
    InstructorApprovalService, Depends(get_approval_service)
]


def bearer_token(request: Request) -> str | None:
    """Token of an ``Authorization: Bearer <token>`` header, if any."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _identify(token: str) -> TokenUser:
    claims = decode_access_token(token)
    user = TokenUser(id=claims["sub"], email=claims.get("email", ""), role=claims["role"])
    set_user_id(user.id)
    return user


async def get_current_user(
    token: Annotated[str | None, Depends(bearer_token)],
) -> TokenUser:
    if token is None:
        raise _unauthorized("Not authorized, no token")
    try:
        return _identify(token)
    except (JWTError, ValueError) as e:
        # ValueError covers claims that fail TokenUser validation
        raise _unauthorized("Not authorized, token failed") from e


async def get_current_user_optional(
    token: Annotated[str | None, Depends(bearer_token)],
) -> TokenUser | None:
    """Anonymous callers and broken tokens both yield None."""
    if token is None:
        return None
    try:
        return _identify(token)
    except (JWTError, ValueError):
        return None


def require_role(*allowed_roles: UserRole):
    """Dependency factory admitting only callers holding one of ``allowed_roles``."""

    async def check_role(
        user: Annotated[TokenUser, Depends(get_current_user)],
    ) -> TokenUser:
        if not has_role(user.role, *allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role {user.role.value}",
            )
        return user

    return check_role


CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
OptionalUser = Annotated[TokenUser | None, Depends(get_current_user_optional)]
AdminUser = Annotated[TokenUser, Depends(require_role(UserRole.ADMIN))]
InstructorUser = Annotated[TokenUser, Depends(require_role(UserRole.INSTRUCTOR))]
