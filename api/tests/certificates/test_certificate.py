"""Tests for certificate eligibility."""

from uuid import uuid4

import pytest

from coursehub.certificates.service import CourseNotCompletedError
from coursehub.core.errors import CourseNotFoundError, NotEnrolledError
from coursehub.progress.ledger import FALLBACK_INSTRUCTOR_NAME


@pytest.fixture
def setup(db, make_user, make_course):
    instructor = make_user(role="instructor", name="Grace Hopper")
    student = make_user(name="Ada")
    course = make_course(instructor, modules=4, title="Compilers")
    db.enroll(student.id, course.id)
    return instructor, student, course


async def _complete(services, student, course, count: int) -> None:
    for module in course.modules[:count]:
        await services.progress_tracker.complete_module(student.id, course.id, module.id)


class TestIssueCertificate:
    """Tests for CertificateEvaluator.issue."""

    @pytest.mark.asyncio
    async def test_incomplete_course_is_forbidden(self, services, setup) -> None:
        _, student, course = setup
        await _complete(services, student, course, 3)

        with pytest.raises(CourseNotCompletedError) as exc_info:
            await services.certificate_evaluator.issue(student.id, course.id)

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Course not completed"

    @pytest.mark.asyncio
    async def test_completed_course(self, services, db, setup) -> None:
        _, student, course = setup
        await _complete(services, student, course, 4)

        certificate = await services.certificate_evaluator.issue(student.id, course.id)

        assert certificate.student_name == "Ada"
        assert certificate.course_title == "Compilers"
        assert certificate.instructor_name == "Grace Hopper"
        last = max(
            c.completed_at for c in db.completions[(student.id, course.id)].values()
        )
        assert certificate.last_module_completed_at == last
        assert certificate.completed_at >= last

    @pytest.mark.asyncio
    async def test_missing_instructor_uses_fallback_name(
        self, services, db, setup
    ) -> None:
        instructor, student, course = setup
        await _complete(services, student, course, 4)
        del db.users[instructor.id]

        certificate = await services.certificate_evaluator.issue(student.id, course.id)

        assert certificate.instructor_name == FALLBACK_INSTRUCTOR_NAME

    @pytest.mark.asyncio
    async def test_course_without_modules_is_not_complete(
        self, services, db, make_user, make_course
    ) -> None:
        student = make_user()
        course = make_course(make_user(role="instructor"), modules=0)
        db.enroll(student.id, course.id)

        with pytest.raises(CourseNotCompletedError):
            await services.certificate_evaluator.issue(student.id, course.id)

    @pytest.mark.asyncio
    async def test_not_enrolled(self, services, make_user, setup) -> None:
        _, _, course = setup
        with pytest.raises(NotEnrolledError):
            await services.certificate_evaluator.issue(make_user().id, course.id)

    @pytest.mark.asyncio
    async def test_unknown_course(self, services, setup) -> None:
        _, student, _ = setup
        with pytest.raises(CourseNotFoundError):
            await services.certificate_evaluator.issue(student.id, uuid4())
