"""Tests for platform administration."""

from uuid import uuid4

import pytest

from coursehub.admin.service import CannotDeleteAdminError, CannotDeleteSelfError
from coursehub.core.errors import CourseNotFoundError, UserNotFoundError


class TestStats:
    @pytest.mark.asyncio
    async def test_counts(self, services, make_user, make_course) -> None:
        make_user(role="admin")
        instructor = make_user(role="instructor")
        make_user()
        make_user()
        make_course(instructor)

        stats = await services.admin_service.stats()

        assert stats.total_users == 4
        assert stats.total_students == 2
        assert stats.total_instructors == 1
        assert stats.total_courses == 1


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_removes_enrollments_keeps_reviews(
        self, services, db, make_user, make_course
    ) -> None:
        admin = make_user(role="admin")
        student = make_user()
        course = make_course(make_user(role="instructor"), modules=1)
        db.enroll(student.id, course.id)
        await services.progress_tracker.complete_module(
            student.id, course.id, course.modules[0].id
        )
        await services.review_aggregator.add_review(student.id, course.id, 4)

        await services.admin_service.delete_user(admin.id, student.id)

        assert student.id not in db.users
        assert db.students_of(course.id) == set()
        assert db.courses_of(student.id) == set()
        assert (student.id, course.id) not in db.completions
        assert db.courses[course.id].review_count == 1
        assert student.id in db.reviews[course.id]

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, services, make_user) -> None:
        admin = make_user(role="admin")
        with pytest.raises(CannotDeleteSelfError):
            await services.admin_service.delete_user(admin.id, admin.id)

    @pytest.mark.asyncio
    async def test_cannot_delete_other_admin(self, services, make_user) -> None:
        admin = make_user(role="admin")
        other = make_user(role="admin")
        with pytest.raises(CannotDeleteAdminError):
            await services.admin_service.delete_user(admin.id, other.id)

    @pytest.mark.asyncio
    async def test_unknown_user(self, services, make_user) -> None:
        with pytest.raises(UserNotFoundError):
            await services.admin_service.delete_user(make_user(role="admin").id, uuid4())


class TestCourses:
    @pytest.mark.asyncio
    async def test_delete_any_course(self, services, db, make_user, make_course) -> None:
        course = make_course(make_user(role="instructor"))
        student = make_user()
        db.enroll(student.id, course.id)

        await services.admin_service.delete_course(course.id)

        assert course.id not in db.courses
        assert db.courses_of(student.id) == set()

    @pytest.mark.asyncio
    async def test_delete_unknown_course(self, services) -> None:
        with pytest.raises(CourseNotFoundError):
            await services.admin_service.delete_course(uuid4())

    @pytest.mark.asyncio
    async def test_list_courses(self, services, make_user, make_course) -> None:
        instructor = make_user(role="instructor")
        make_course(instructor, title="A")
        make_course(instructor, title="B")

        views = await services.admin_service.list_courses()

        assert {v.course.title for v in views} == {"A", "B"}
