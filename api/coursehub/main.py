"""CourseHub API application.

Run with ``uvicorn coursehub.main:app``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from coursehub import __version__
from coursehub.admin.dependencies import set_admin_service_getter
from coursehub.admin.router import router as admin_router
from coursehub.admin.service import AdminService
from coursehub.auth.approval import InstructorApprovalService
from coursehub.auth.dependencies import (
    set_approval_service_getter,
    set_auth_service_getter,
)
from coursehub.auth.repository import UserRepository
from coursehub.auth.router import router as auth_router
from coursehub.auth.service import AuthService
from coursehub.categories.dependencies import set_category_service_getter
from coursehub.categories.repository import CategoryRepository
from coursehub.categories.router import router as categories_router
from coursehub.categories.service import CategoryService
from coursehub.certificates.dependencies import set_certificate_evaluator_getter
from coursehub.certificates.router import router as certificates_router
from coursehub.certificates.service import CertificateEvaluator
from coursehub.config import get_settings
from coursehub.core.database import CassandraConnection, close_cassandra, open_cassandra
from coursehub.core.handlers import register_exception_handlers
from coursehub.core.logging import configure_structlog, get_logger
from coursehub.core.middleware import RequestContextMiddleware
from coursehub.courses.dependencies import set_course_service_getter
from coursehub.courses.repository import CourseRepository, ModuleRepository
from coursehub.courses.router import router as courses_router
from coursehub.courses.service import CourseService
from coursehub.health.router import router as health_router
from coursehub.progress.dependencies import (
    set_enrollment_ledger_getter,
    set_progress_tracker_getter,
)
from coursehub.progress.ledger import EnrollmentLedger
from coursehub.progress.repository import CompletionRepository, EnrollmentRepository
from coursehub.progress.router import router as progress_router
from coursehub.progress.tracker import ProgressTracker
from coursehub.reviews.dependencies import set_review_aggregator_getter
from coursehub.reviews.repository import ReviewRepository
from coursehub.reviews.router import router as reviews_router
from coursehub.reviews.service import ReviewAggregator


settings = get_settings()
configure_structlog(settings, log_dir=settings.log_dir)

logger = get_logger(__name__)


class AppState:
    """Services shared by all requests, filled in at startup."""

    cassandra_session: Any = None
    auth_service: AuthService | None = None
    approval_service: InstructorApprovalService | None = None
    category_service: CategoryService | None = None
    course_service: CourseService | None = None
    enrollment_ledger: EnrollmentLedger | None = None
    progress_tracker: ProgressTracker | None = None
    review_aggregator: ReviewAggregator | None = None
    certificate_evaluator: CertificateEvaluator | None = None
    admin_service: AdminService | None = None


app_state = AppState()


def init_services(
    state: AppState,
    *,
    users: UserRepository,
    courses: CourseRepository,
    modules: ModuleRepository,
    categories: CategoryRepository,
    enrollments: EnrollmentRepository,
    completions: CompletionRepository,
    reviews: ReviewRepository,
) -> AppState:
    """Wire every service on top of the given repositories."""
    ledger = EnrollmentLedger(users=users, courses=courses, enrollments=enrollments)
    tracker = ProgressTracker(
        users=users,
        courses=courses,
        modules=modules,
        completions=completions,
        ledger=ledger,
    )
    course_service = CourseService(
        users=users,
        courses=courses,
        modules=modules,
        categories=categories,
        enrollments=enrollments,
        completions=completions,
        reviews=reviews,
        ledger=ledger,
    )

    state.auth_service = AuthService(users)
    state.approval_service = InstructorApprovalService(users)
    state.category_service = CategoryService(categories)
    state.course_service = course_service
    state.enrollment_ledger = ledger
    state.progress_tracker = tracker
    state.review_aggregator = ReviewAggregator(
        users=users, courses=courses, reviews=reviews, ledger=ledger
    )
    state.certificate_evaluator = CertificateEvaluator(
        users=users, courses=courses, ledger=ledger, tracker=tracker
    )
    state.admin_service = AdminService(
        users=users,
        courses=courses,
        enrollments=enrollments,
        completions=completions,
        course_service=course_service,
    )
    return state


def _service_getter(name: str):
    def get_service():
        service = getattr(app_state, name)
        if service is None:
            msg = f"{name} not initialized"
            raise RuntimeError(msg)
        return service

    return get_service


async def _start_database() -> None:
    session = await open_cassandra()
    app_state.cassandra_session = session

    keyspace = settings.cassandra_keyspace
    init_services(
        app_state,
        users=UserRepository(session, keyspace),
        courses=CourseRepository(session, keyspace),
        modules=ModuleRepository(session, keyspace),
        categories=CategoryRepository(session, keyspace),
        enrollments=EnrollmentRepository(session, keyspace),
        completions=CompletionRepository(session, keyspace),
        reviews=ReviewRepository(session, keyspace),
    )
    logger.info("services_initialized")

    if settings.bootstrap_admin_configured:
        await app_state.auth_service.ensure_admin(
            settings.bootstrap_admin_email,
            settings.bootstrap_admin_password,
            settings.bootstrap_admin_name,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=__version__,
        environment=settings.environment,
    )
    app.state.cassandra = CassandraConnection
    try:
        await _start_database()
    except ConnectionError as e:
        # Serve anyway; /health/ready reports the outage
        logger.warning("database_unavailable", error=str(e))

    yield

    logger.info("shutting_down_application")
    await close_cassandra()


def create_app() -> FastAPI:
    app = FastAPI(
        title="CourseHub API",
        version=__version__,
        description="Courses, enrollments, progress, reviews and certificates",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )
    # Added last so it is the outermost layer
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )
    register_exception_handlers(app)

    # progress before courses: /v1/courses/student/* must not match /{course_id}
    for router in (
        health_router,
        auth_router,
        categories_router,
        progress_router,
        courses_router,
        reviews_router,
        certificates_router,
        admin_router,
    ):
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": "CourseHub API", "version": __version__}

    return app


set_auth_service_getter(_service_getter("auth_service"))
set_approval_service_getter(_service_getter("approval_service"))
set_category_service_getter(_service_getter("category_service"))
set_course_service_getter(_service_getter("course_service"))
set_enrollment_ledger_getter(_service_getter("enrollment_ledger"))
set_progress_tracker_getter(_service_getter("progress_tracker"))
set_review_aggregator_getter(_service_getter("review_aggregator"))
set_certificate_evaluator_getter(_service_getter("certificate_evaluator"))
set_admin_service_getter(_service_getter("admin_service"))


app = create_app()
