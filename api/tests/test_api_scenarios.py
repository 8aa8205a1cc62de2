"""End-to-end API flows over in-memory services."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from fakes import DEFAULT_PASSWORD


@pytest.fixture
def admin_headers(make_user, login) -> dict:
    make_user(role="admin", email="admin@example.com", password=DEFAULT_PASSWORD)
    return login("admin@example.com")


def _register(client: TestClient, email: str, role: str = "student") -> dict:
    response = client.post(
        "/v1/auth/register",
        json={
            "name": email.split("@")[0].title(),
            "email": email,
            "password": DEFAULT_PASSWORD,
            "role": role,
        },
    )
    assert response.status_code == 201, response.json()
    return response.json()


class TestInstructorOnboarding:
    """Registration, approval gate and admin approval."""

    def test_pending_instructor_cannot_log_in_until_approved(
        self, client: TestClient, admin_headers: dict, login
    ) -> None:
        body = _register(client, "prof@example.com", role="instructor")
        assert body["message"] == "Instructor request submitted. Await admin approval."
        assert body["user"]["instructor_status"] == "pending"

        response = client.post(
            "/v1/auth/login",
            json={"email": "prof@example.com", "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Instructor account pending admin approval"

        pending = client.get("/v1/admin/instructors/pending", headers=admin_headers)
        assert [u["email"] for u in pending.json()["items"]] == ["prof@example.com"]

        user_id = body["user"]["id"]
        response = client.post(
            f"/v1/admin/instructors/{user_id}/approve", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["changed"] is True

        headers = login("prof@example.com")
        me = client.get("/v1/auth/me", headers=headers).json()
        assert me["role"] == "instructor"
        assert me["instructor_status"] == "approved"

    def test_rejected_instructor(
        self, client: TestClient, admin_headers: dict
    ) -> None:
        user_id = _register(client, "prof@example.com", role="instructor")["user"]["id"]
        client.post(f"/v1/admin/instructors/{user_id}/reject", headers=admin_headers)

        response = client.post(
            "/v1/auth/login",
            json={"email": "prof@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 403
        assert response.json()["code"] == "instructor_rejected"

    def test_admin_cannot_self_register(self, client: TestClient) -> None:
        response = client.post(
            "/v1/auth/register",
            json={
                "name": "Mallory",
                "email": "mallory@example.com",
                "password": DEFAULT_PASSWORD,
                "role": "admin",
            },
        )
        assert response.status_code == 422

    def test_student_cannot_approve(self, client: TestClient, login) -> None:
        _register(client, "ada@example.com")
        user_id = _register(client, "prof@example.com", role="instructor")["user"]["id"]

        response = client.post(
            f"/v1/admin/instructors/{user_id}/approve",
            headers=login("ada@example.com"),
        )

        assert response.status_code == 403


class TestLearningFlow:
    """An instructor publishes a course and a student completes it."""

    def test_enroll_complete_and_certify(
        self, client: TestClient, make_user, login
    ) -> None:
        make_user(
            role="instructor",
            name="Grace",
            email="grace@example.com",
            password=DEFAULT_PASSWORD,
        )
        instructor_auth = login("grace@example.com")
        response = client.post(
            "/v1/courses",
            json={"title": "Compilers", "price": "19.90"},
            headers=instructor_auth,
        )
        assert response.status_code == 201, response.json()
        course_id = response.json()["id"]
        module_ids = []
        for title in ("Lexing", "Parsing"):
            response = client.post(
                f"/v1/courses/{course_id}/modules", json={"title": title}, headers=instructor_auth
            )
            assert response.status_code == 201
            module_ids.append(response.json()["id"])

        _register(client, "ada@example.com")
        student = login("ada@example.com")

        response = client.post(f"/v1/courses/{course_id}/enroll", headers=student)
        assert response.json()["student_count"] == 1
        again = client.post(f"/v1/courses/{course_id}/enroll", headers=student)
        assert again.json()["already_enrolled"] is True
        assert again.json()["student_count"] == 1

        response = client.post(
            f"/v1/courses/{course_id}/modules/{module_ids[0]}/complete", headers=student
        )
        assert response.json()["progress"] == 50

        response = client.get(f"/v1/courses/{course_id}/certificate", headers=student)
        assert response.status_code == 403
        assert response.json()["message"] == "Course not completed"

        client.post(
            f"/v1/courses/{course_id}/modules/{module_ids[1]}/complete", headers=student
        )
        response = client.get(f"/v1/courses/{course_id}/certificate", headers=student)
        assert response.status_code == 200
        assert response.json()["instructor_name"] == "Grace"
        assert response.json()["course_title"] == "Compilers"

        progress = client.get("/v1/courses/student/progress", headers=student).json()
        assert [p["progress"] for p in progress["items"]] == [100]

        enrolled = client.get("/v1/courses/student/enrolled", headers=student).json()
        assert [c["id"] for c in enrolled["items"]] == [course_id]

        detail = client.get(f"/v1/courses/{course_id}", headers=student).json()
        assert detail["is_enrolled"] is True
        assert [m["title"] for m in detail["modules"]] == ["Lexing", "Parsing"]

        me = client.get("/v1/auth/me", headers=student).json()
        assert me["enrolled_courses"] == [course_id]
        assert len(me["completed_modules"]) == 2

    def test_review_updates_listing_rating(
        self, client: TestClient, db, make_user, make_course, login
    ) -> None:
        course = make_course(make_user(role="instructor"), modules=1)
        student = make_user(email="ada@example.com", password=DEFAULT_PASSWORD)
        db.enroll(student.id, course.id)
        headers = login("ada@example.com")

        response = client.post(
            f"/v1/courses/{course.id}/reviews",
            json={"rating": 4, "comment": "Solid"},
            headers=headers,
        )
        assert response.status_code == 201
        duplicate = client.post(
            f"/v1/courses/{course.id}/reviews", json={"rating": 5}, headers=headers
        )
        assert duplicate.status_code == 409

        listing = client.get("/v1/courses").json()
        assert listing["items"][0]["avg_rating"] == 4.0
        assert listing["items"][0]["review_count"] == 1

    def test_review_requires_enrollment(
        self, client: TestClient, make_user, make_course, login
    ) -> None:
        course = make_course(make_user(role="instructor"))
        make_user(email="ada@example.com", password=DEFAULT_PASSWORD)

        response = client.post(
            f"/v1/courses/{course.id}/reviews",
            json={"rating": 4},
            headers=login("ada@example.com"),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Enroll to review"

    def test_student_cannot_create_course(self, client: TestClient, login) -> None:
        _register(client, "ada@example.com")
        response = client.post(
            "/v1/courses", json={"title": "Sneaky"}, headers=login("ada@example.com")
        )
        assert response.status_code == 403


class TestErrorEnvelope:
    """Every failure shares one response shape."""

    def test_not_found(self, client: TestClient) -> None:
        response = client.get(
            f"/v1/courses/{uuid4()}", headers={"X-Request-ID": "req-42"}
        )

        assert response.status_code == 404
        assert response.json() == {
            "error": True,
            "message": "Course not found",
            "code": "course_not_found",
            "status_code": 404,
            "request_id": "req-42",
        }

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_validation(self, client: TestClient) -> None:
        response = client.post("/v1/auth/register", json={"email": "not-an-email"})

        body = response.json()
        assert response.status_code == 422
        assert body["code"] == "validation"
        assert {d["field"] for d in body["details"]} >= {"body.email", "body.name"}
