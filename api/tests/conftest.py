"""Shared fixtures.

Settings are read from the environment once (``get_settings`` is cached),
so the test environment is set before any application module is imported.
"""

import os
import tempfile
from collections.abc import Callable, Iterator
from decimal import Decimal
from pathlib import Path

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_REQUESTS", "false")
os.environ.setdefault(
    "LOG_DIR", str(Path(tempfile.gettempdir()) / "coursehub-test-logs")
)
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key-with-at-least-32-characters")

from fastapi.testclient import TestClient  # noqa: E402

from coursehub.auth.models import User  # noqa: E402
from coursehub.auth.permissions import InstructorStatus, UserRole  # noqa: E402
from coursehub.auth.security import hash_password  # noqa: E402
from coursehub.courses.models import Course, Module  # noqa: E402
from fakes import DEFAULT_PASSWORD, InMemoryDatabase, build_repositories  # noqa: E402


SERVICE_NAMES = (
    "auth_service",
    "approval_service",
    "category_service",
    "course_service",
    "enrollment_ledger",
    "progress_tracker",
    "review_aggregator",
    "certificate_evaluator",
    "admin_service",
)


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def repos(db: InMemoryDatabase) -> dict:
    return build_repositories(db)


@pytest.fixture
def services(repos: dict):
    """Every service wired on top of the in-memory repositories."""
    from coursehub.main import AppState, init_services

    return init_services(AppState(), **repos)


@pytest.fixture
def client(services) -> Iterator[TestClient]:
    """API client backed by in-memory services (no database lifespan)."""
    from coursehub import main

    saved = {name: getattr(main.app_state, name) for name in SERVICE_NAMES}
    for name in SERVICE_NAMES:
        setattr(main.app_state, name, getattr(services, name))

    yield TestClient(main.app)

    for name, service in saved.items():
        setattr(main.app_state, name, service)


@pytest.fixture
def make_user(db: InMemoryDatabase) -> Callable[..., User]:
    """Factory seeding a user directly into the in-memory database."""
    counter = iter(range(1, 10_000))

    def _make(
        role: UserRole | str = UserRole.STUDENT,
        instructor_status: InstructorStatus | None = None,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        n = next(counter)
        role = UserRole(role)
        if role == UserRole.INSTRUCTOR and instructor_status is None:
            instructor_status = InstructorStatus.APPROVED
        user = User(
            email=email or f"{role.value}{n}@example.com",
            name=name or f"{role.value.title()} {n}",
            password_hash=hash_password(password) if password else "not-a-hash",
            role=role.value,
            instructor_status=(
                InstructorStatus(instructor_status).value if instructor_status else None
            ),
        )
        return db.add_user(user)

    return _make


@pytest.fixture
def make_course(db: InMemoryDatabase) -> Callable[..., Course]:
    """Factory seeding a course with ``modules`` numbered modules."""

    def _make(instructor: User, modules: int = 0, title: str = "Python 101") -> Course:
        course = Course(
            instructor_id=instructor.id,
            title=title,
            description="Learn things",
            price=Decimal("49.90"),
        )
        course_modules = [
            Module(course_id=course.id, title=f"Module {i}", position=i)
            for i in range(1, modules + 1)
        ]
        return db.add_course(course, course_modules)

    return _make


@pytest.fixture
def login(client: TestClient) -> Callable[..., dict]:
    """Log in through the API and return an Authorization header."""

    def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = client.post(
            "/v1/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.json()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
