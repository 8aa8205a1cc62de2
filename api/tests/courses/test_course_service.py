"""Tests for course and module management."""

from decimal import Decimal
from uuid import uuid4

import pytest

from coursehub.categories.models import Category
from coursehub.core.errors import CourseModuleNotFoundError, CourseNotFoundError
from coursehub.courses.schemas import (
    CreateCourseRequest,
    ModuleRequest,
    UpdateCourseRequest,
    UpdateModuleRequest,
)
from coursehub.courses.service import (
    InstructorNotApprovedError,
    InstructorNotFoundError,
    NotCourseOwnerError,
    UnknownCategoryError,
)


@pytest.fixture
def instructor(make_user):
    return make_user(role="instructor", name="Grace")


class TestCreateCourse:
    """Tests for CourseService.create_course."""

    @pytest.mark.asyncio
    async def test_approved_instructor(self, services, db, instructor) -> None:
        data = CreateCourseRequest(title="  Python 101 ", price=Decimal("10.00"))

        course = await services.course_service.create_course(instructor.id, data)

        assert course.title == "Python 101"
        assert course.instructor_id == instructor.id
        assert (course.avg_rating, course.review_count) == (0.0, 0)
        assert course.id in db.courses

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["pending", "rejected"])
    async def test_unapproved_instructor(self, services, make_user, status) -> None:
        user = make_user(role="instructor", instructor_status=status)
        with pytest.raises(InstructorNotApprovedError):
            await services.course_service.create_course(
                user.id, CreateCourseRequest(title="Python 101")
            )

    @pytest.mark.asyncio
    async def test_category_by_name(self, services, db, instructor) -> None:
        category = db.add_category(Category(name="Programming"))

        course = await services.course_service.create_course(
            instructor.id, CreateCourseRequest(title="Python 101", category="programming")
        )

        assert course.category_id == category.id

    @pytest.mark.asyncio
    async def test_unknown_category_name(self, services, instructor) -> None:
        with pytest.raises(UnknownCategoryError) as exc_info:
            await services.course_service.create_course(
                instructor.id, CreateCourseRequest(title="Python 101", category="Cooking")
            )
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_category_id(self, services, instructor) -> None:
        with pytest.raises(UnknownCategoryError):
            await services.course_service.create_course(
                instructor.id,
                CreateCourseRequest(title="Python 101", category_id=uuid4()),
            )

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValueError):
            CreateCourseRequest(title="Python 101", price=Decimal(-1))


class TestUpdateCourse:
    @pytest.mark.asyncio
    async def test_owner_edits(self, services, db, instructor, make_course) -> None:
        course = make_course(instructor)

        await services.course_service.update_course(
            course.id, instructor.id, UpdateCourseRequest(title="Python 102")
        )

        assert db.courses[course.id].title == "Python 102"
        assert db.courses[course.id].description == course.description

    @pytest.mark.asyncio
    async def test_other_instructor_forbidden(
        self, services, make_user, instructor, make_course
    ) -> None:
        course = make_course(instructor)
        other = make_user(role="instructor")
        with pytest.raises(NotCourseOwnerError):
            await services.course_service.update_course(
                course.id, other.id, UpdateCourseRequest(title="Hijacked")
            )

    @pytest.mark.asyncio
    async def test_unknown_course(self, services, instructor) -> None:
        with pytest.raises(CourseNotFoundError):
            await services.course_service.update_course(
                uuid4(), instructor.id, UpdateCourseRequest(title="Nothing")
            )


class TestModules:
    """Tests for module add, update and delete."""

    @pytest.mark.asyncio
    async def test_add_appends_position(self, services, instructor, make_course) -> None:
        course = make_course(instructor, modules=2)

        module = await services.course_service.add_module(
            course.id, instructor.id, ModuleRequest(title="Decorators")
        )

        assert module.position == 3
        view = await services.course_service.get_course_view(course.id)
        assert [m.title for m in view.course.modules][-1] == "Decorators"

    @pytest.mark.asyncio
    async def test_update_module(self, services, db, instructor, make_course) -> None:
        course = make_course(instructor, modules=1)
        module = course.modules[0]

        updated = await services.course_service.update_module(
            course.id,
            module.id,
            instructor.id,
            UpdateModuleRequest(video_url="https://videos.example.com/1"),
        )

        assert updated.title == module.title
        assert db.modules[course.id][module.id].video_url == "https://videos.example.com/1"

    def test_update_module_needs_a_field(self) -> None:
        with pytest.raises(ValueError):
            UpdateModuleRequest()

    @pytest.mark.asyncio
    async def test_delete_module(self, services, db, instructor, make_course) -> None:
        course = make_course(instructor, modules=2)

        await services.course_service.delete_module(
            course.id, course.modules[0].id, instructor.id
        )

        assert list(db.modules[course.id]) == [course.modules[1].id]

    @pytest.mark.asyncio
    async def test_unknown_module(self, services, instructor, make_course) -> None:
        course = make_course(instructor, modules=1)
        with pytest.raises(CourseModuleNotFoundError):
            await services.course_service.delete_module(course.id, uuid4(), instructor.id)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_add(
        self, services, make_user, instructor, make_course
    ) -> None:
        course = make_course(instructor)
        with pytest.raises(NotCourseOwnerError):
            await services.course_service.add_module(
                course.id, make_user(role="instructor").id, ModuleRequest(title="X")
            )


class TestDeleteCourse:
    """Deleting a course removes both sides of every enrollment."""

    @pytest.mark.asyncio
    async def test_cascade(self, services, db, make_user, instructor, make_course) -> None:
        course = make_course(instructor, modules=1)
        kept = make_course(instructor, title="Kept")
        student = make_user()
        db.enroll(student.id, course.id)
        db.enroll(student.id, kept.id)
        await services.progress_tracker.complete_module(
            student.id, course.id, course.modules[0].id
        )
        await services.review_aggregator.add_review(student.id, course.id, 5)

        await services.course_service.delete_course(course.id, instructor.id)

        assert course.id not in db.courses
        assert db.students_of(course.id) == set()
        assert db.courses_of(student.id) == {kept.id}
        assert (student.id, course.id) not in db.completions
        assert course.id not in db.reviews
        assert course.id not in db.modules

    @pytest.mark.asyncio
    async def test_non_owner(self, services, make_user, instructor, make_course) -> None:
        course = make_course(instructor)
        with pytest.raises(NotCourseOwnerError):
            await services.course_service.delete_course(
                course.id, make_user(role="instructor").id
            )


class TestViews:
    @pytest.mark.asyncio
    async def test_course_view(self, services, db, make_user, instructor, make_course) -> None:
        course = make_course(instructor, modules=2)
        student = make_user()
        db.enroll(student.id, course.id)

        view = await services.course_service.get_course_view(course.id, student.id)
        anonymous = await services.course_service.get_course_view(course.id)

        assert view.instructor_name == "Grace"
        assert view.student_count == 1
        assert view.is_enrolled is True
        assert anonymous.is_enrolled is False
        assert [m.position for m in view.course.modules] == [1, 2]

    @pytest.mark.asyncio
    async def test_filter_by_category(self, services, db, instructor) -> None:
        category = db.add_category(Category(name="Data"))
        await services.course_service.create_course(
            instructor.id, CreateCourseRequest(title="Pandas", category_id=category.id)
        )
        await services.course_service.create_course(
            instructor.id, CreateCourseRequest(title="Django")
        )

        views = await services.course_service.list_courses(category.id)

        assert [v.course.title for v in views] == ["Pandas"]
        assert views[0].category_name == "Data"

    @pytest.mark.asyncio
    async def test_instructor_courses_list_students(
        self, services, db, make_user, instructor, make_course
    ) -> None:
        course = make_course(instructor)
        student = make_user(name="Ada")
        db.enroll(student.id, course.id)

        views = await services.course_service.list_instructor_courses(instructor.id)

        assert [s.name for s in views[0].students] == ["Ada"]

    @pytest.mark.asyncio
    async def test_instructor_profile(
        self, services, db, make_user, instructor, make_course
    ) -> None:
        first = make_course(instructor, title="One")
        second = make_course(instructor, title="Two")
        for course in (first, second):
            db.enroll(make_user().id, course.id)

        profile = await services.course_service.instructor_profile(instructor.id)

        assert profile.total_students == 2
        assert len(profile.courses) == 2

    @pytest.mark.asyncio
    async def test_profile_of_student_not_found(self, services, make_user) -> None:
        with pytest.raises(InstructorNotFoundError):
            await services.course_service.instructor_profile(make_user().id)
