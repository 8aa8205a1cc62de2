"""Authentication API endpoints.

Provides routes for:
- User registration (students and instructors)
- Login gated by instructor approval
- Current user profile
"""

from fastapi import APIRouter, status

from coursehub.auth.dependencies import AuthServiceDep, CurrentUser
from coursehub.auth.permissions import UserRole
from coursehub.auth.schemas import (
    CompletedModuleResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from coursehub.progress.dependencies import EnrollmentLedgerDep, ProgressTrackerDep


router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={
        409: {"description": "Email already registered"},
    },
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> RegisterResponse:
    """Register a student or instructor.

    Instructors cannot log in until an admin approves them.
    """
    user = await auth_service.register_user(data)
    message = (
        "Instructor request submitted. Await admin approval."
        if user.role == UserRole.INSTRUCTOR.value
        else "User registered successfully"
    )
    return RegisterResponse(message=message, user=auth_service.to_response(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User login",
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "Instructor pending or rejected"},
    },
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """Authenticate user and return a bearer access token."""
    user = await auth_service.authenticate_user(data.email, data.password)
    access_token, expires_in = auth_service.issue_token(user)
    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=auth_service.to_response(user),
    )


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
)
async def get_me(
    user: CurrentUser,
    auth_service: AuthServiceDep,
    ledger: EnrollmentLedgerDep,
    tracker: ProgressTrackerDep,
) -> MeResponse:
    """Profile of the authenticated user with enrollments and completions."""
    db_user = await auth_service.get_user(user.id)
    enrolled = await ledger.list_enrolled_course_ids(db_user.id)
    completed = await tracker.list_completed(db_user.id)

    profile = auth_service.to_response(db_user)
    return MeResponse(
        **profile.model_dump(),
        enrolled_courses=enrolled,
        completed_modules=[
            CompletedModuleResponse(
                course_id=c.course_id,
                module_id=c.module_id,
                completed_at=c.completed_at,
            )
            for c in completed
        ],
    )
