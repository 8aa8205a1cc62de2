"""In-memory repository doubles for service and API tests.

Each fake exposes the same async interface as its Cassandra repository and
mimics the storage guarantees the services rely on: the enrollment batch
writes both views, IF NOT EXISTS inserts report ``applied`` and the rating
update only applies on a matching ``rating_version``. Reads and conditional
writes on courses and reviews yield to the event loop first, so concurrent
service calls interleave the way they would against a real cluster.
"""

import asyncio
import copy
from collections import defaultdict
from uuid import UUID

from coursehub.auth.models import User
from coursehub.categories.models import Category, name_key
from coursehub.courses.models import Course, Module
from coursehub.progress.models import CompletedModule, Enrollment
from coursehub.reviews.models import Review


DEFAULT_PASSWORD = "Sup3rSecret!"


class InMemoryDatabase:
    """Shared state behind all fake repositories."""

    def __init__(self):
        self.users: dict[UUID, User] = {}
        self.courses: dict[UUID, Course] = {}
        self.modules: dict[UUID, dict[UUID, Module]] = defaultdict(dict)
        self.categories: dict[UUID, Category] = {}
        self.category_names: dict[str, UUID] = {}
        self.enrollments_by_course: dict[UUID, dict[UUID, Enrollment]] = defaultdict(dict)
        self.enrollments_by_user: dict[UUID, dict[UUID, Enrollment]] = defaultdict(dict)
        self.completions: dict[tuple[UUID, UUID], dict[UUID, CompletedModule]] = (
            defaultdict(dict)
        )
        self.reviews: dict[UUID, dict[UUID, Review]] = defaultdict(dict)
        # Number of rating updates that will lose to a simulated concurrent writer
        self.rating_conflicts = 0
        self.rating_update_calls = 0

    # Seeding helpers -----------------------------------------------------

    def add_user(self, user: User) -> User:
        self.users[user.id] = copy.deepcopy(user)
        return user

    def add_course(self, course: Course, modules: list[Module] | None = None) -> Course:
        stored = copy.deepcopy(course)
        stored.modules = []
        self.courses[course.id] = stored
        for module in modules or []:
            self.modules[course.id][module.id] = copy.deepcopy(module)
        course.modules = list(modules or [])
        return course

    def add_category(self, category: Category) -> Category:
        self.categories[category.id] = copy.deepcopy(category)
        self.category_names[category.key] = category.id
        return category

    def enroll(self, user_id: UUID, course_id: UUID) -> Enrollment:
        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        self.enrollments_by_course[course_id][user_id] = enrollment
        self.enrollments_by_user[user_id][course_id] = copy.deepcopy(enrollment)
        return enrollment

    # Views ---------------------------------------------------------------

    def students_of(self, course_id: UUID) -> set[UUID]:
        return set(self.enrollments_by_course.get(course_id, {}))

    def courses_of(self, user_id: UUID) -> set[UUID]:
        return set(self.enrollments_by_user.get(user_id, {}))


class FakeUserRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> User | None:
        return copy.deepcopy(self.db.users.get(user_id))

    async def get_by_email(self, email: str) -> User | None:
        email = email.lower()
        for user in self.db.users.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    async def list_all(self) -> list[User]:
        return [copy.deepcopy(u) for u in self.db.users.values()]

    async def list_by_instructor_status(self, status: str) -> list[User]:
        return [
            copy.deepcopy(u)
            for u in self.db.users.values()
            if u.instructor_status == status
        ]

    async def count(self, role: str | None = None) -> int:
        return sum(1 for u in self.db.users.values() if role is None or u.role == role)

    async def insert(self, user: User) -> None:
        self.db.users[user.id] = copy.deepcopy(user)

    async def update_password(self, user_id, password_hash, updated_at) -> None:
        self.db.users[user_id].password_hash = password_hash
        self.db.users[user_id].updated_at = updated_at

    async def update_instructor_status(self, user_id, status, updated_at) -> None:
        self.db.users[user_id].instructor_status = status
        self.db.users[user_id].updated_at = updated_at

    async def delete(self, user_id: UUID) -> None:
        self.db.users.pop(user_id, None)


class FakeCourseRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get(self, course_id: UUID) -> Course | None:
        await asyncio.sleep(0)
        return copy.deepcopy(self.db.courses.get(course_id))

    async def list_all(self, category_id: UUID | None = None) -> list[Course]:
        return [
            copy.deepcopy(c)
            for c in self.db.courses.values()
            if category_id is None or c.category_id == category_id
        ]

    async def list_by_instructor(self, instructor_id: UUID) -> list[Course]:
        return [
            copy.deepcopy(c)
            for c in self.db.courses.values()
            if c.instructor_id == instructor_id
        ]

    async def count(self) -> int:
        return len(self.db.courses)

    async def insert(self, course: Course) -> None:
        stored = copy.deepcopy(course)
        stored.modules = []
        self.db.courses[course.id] = stored

    async def update_details(self, course: Course) -> None:
        stored = self.db.courses[course.id]
        stored.title = course.title
        stored.description = course.description
        stored.price = course.price
        stored.thumbnail_url = course.thumbnail_url
        stored.category_id = course.category_id
        stored.updated_at = course.updated_at

    async def update_rating(
        self, course_id, avg_rating, review_count, expected_version
    ) -> bool:
        self.db.rating_update_calls += 1
        await asyncio.sleep(0)
        stored = self.db.courses.get(course_id)
        if stored is None:
            return False
        if self.db.rating_conflicts > 0:
            self.db.rating_conflicts -= 1
            stored.rating_version += 1
            return False
        if stored.rating_version != expected_version:
            return False
        stored.avg_rating = avg_rating
        stored.review_count = review_count
        stored.rating_version = expected_version + 1
        return True

    async def delete(self, course_id: UUID) -> None:
        self.db.courses.pop(course_id, None)


class FakeModuleRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def list_for_course(self, course_id: UUID) -> list[Module]:
        modules = self.db.modules.get(course_id, {}).values()
        return [copy.deepcopy(m) for m in sorted(modules, key=lambda m: m.position)]

    async def save(self, module: Module) -> None:
        self.db.modules[module.course_id][module.id] = copy.deepcopy(module)

    async def delete(self, module: Module) -> None:
        self.db.modules[module.course_id].pop(module.id, None)

    async def delete_all(self, course_id: UUID) -> None:
        self.db.modules.pop(course_id, None)


class FakeCategoryRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get(self, category_id: UUID) -> Category | None:
        return copy.deepcopy(self.db.categories.get(category_id))

    async def get_by_name(self, name: str) -> Category | None:
        category_id = self.db.category_names.get(name_key(name))
        return await self.get(category_id) if category_id else None

    async def list_all(self) -> list[Category]:
        return [copy.deepcopy(c) for c in self.db.categories.values()]

    async def claim_name(self, name: str, category_id: UUID) -> bool:
        key = name_key(name)
        if key in self.db.category_names:
            return False
        self.db.category_names[key] = category_id
        return True

    async def release_name(self, name: str) -> None:
        self.db.category_names.pop(name_key(name), None)

    async def save(self, category: Category) -> None:
        self.db.categories[category.id] = copy.deepcopy(category)

    async def delete(self, category_id: UUID) -> None:
        self.db.categories.pop(category_id, None)


class FakeEnrollmentRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db
        self.add_calls = 0

    async def get(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        return copy.deepcopy(self.db.enrollments_by_course[course_id].get(user_id))

    async def list_students(self, course_id: UUID) -> list[Enrollment]:
        return [copy.deepcopy(e) for e in self.db.enrollments_by_course[course_id].values()]

    async def count_students(self, course_id: UUID) -> int:
        return len(self.db.enrollments_by_course[course_id])

    async def list_courses(self, user_id: UUID) -> list[Enrollment]:
        return [copy.deepcopy(e) for e in self.db.enrollments_by_user[user_id].values()]

    async def add(self, enrollment: Enrollment) -> None:
        self.add_calls += 1
        self.db.enrollments_by_course[enrollment.course_id][enrollment.user_id] = (
            copy.deepcopy(enrollment)
        )
        self.db.enrollments_by_user[enrollment.user_id][enrollment.course_id] = (
            copy.deepcopy(enrollment)
        )

    async def remove(self, enrollments: list[Enrollment]) -> None:
        for e in enrollments:
            self.db.enrollments_by_course[e.course_id].pop(e.user_id, None)
            self.db.enrollments_by_user[e.user_id].pop(e.course_id, None)

    async def remove_course(self, course_id: UUID) -> list[Enrollment]:
        enrollments = await self.list_students(course_id)
        await self.remove(enrollments)
        return enrollments

    async def remove_user(self, user_id: UUID) -> list[Enrollment]:
        enrollments = await self.list_courses(user_id)
        await self.remove(enrollments)
        return enrollments


class FakeCompletionRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get(self, user_id, course_id, module_id) -> CompletedModule | None:
        return copy.deepcopy(self.db.completions[(user_id, course_id)].get(module_id))

    async def list_for_course(self, user_id, course_id) -> list[CompletedModule]:
        return [copy.deepcopy(c) for c in self.db.completions[(user_id, course_id)].values()]

    async def add_if_absent(self, completion: CompletedModule) -> bool:
        partition = self.db.completions[(completion.user_id, completion.course_id)]
        if completion.module_id in partition:
            return False
        partition[completion.module_id] = copy.deepcopy(completion)
        return True

    async def delete_for_course(self, user_id, course_id) -> None:
        self.db.completions.pop((user_id, course_id), None)


class FakeReviewRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def list_for_course(self, course_id: UUID) -> list[Review]:
        await asyncio.sleep(0)
        return [copy.deepcopy(r) for r in self.db.reviews[course_id].values()]

    async def list_all(self) -> list[Review]:
        return [
            copy.deepcopy(r)
            for partition in self.db.reviews.values()
            for r in partition.values()
        ]

    async def add_if_absent(self, review: Review) -> bool:
        await asyncio.sleep(0)
        partition = self.db.reviews[review.course_id]
        if review.student_id in partition:
            return False
        partition[review.student_id] = copy.deepcopy(review)
        return True

    async def delete(self, review: Review) -> None:
        self.db.reviews[review.course_id].pop(review.student_id, None)

    async def delete_all(self, course_id: UUID) -> None:
        self.db.reviews.pop(course_id, None)


def build_repositories(db: InMemoryDatabase) -> dict:
    """Keyword arguments for ``init_services``."""
    return {
        "users": FakeUserRepository(db),
        "courses": FakeCourseRepository(db),
        "modules": FakeModuleRepository(db),
        "categories": FakeCategoryRepository(db),
        "enrollments": FakeEnrollmentRepository(db),
        "completions": FakeCompletionRepository(db),
        "reviews": FakeReviewRepository(db),
    }
