"""
Tests for admin endpoints.
"""
import pytest

from app.models import ScheduledTest, TestAttempt, TestTemplate, User
from tests.conftest import READING_KEY


@pytest.fixture
def completed_attempt_id(client, auth_headers, scheduled_test):
    """A graded attempt of the test-taker."""
    attempt_id = client.post(
        f"/v1/tests/{scheduled_test.id}/start", headers=auth_headers
    ).json()["id"]
    client.post(
        f"/v1/tests/attempts/{attempt_id}/submit-section",
        json={"section_type": "READING", "answers": {"q1": "Paris"}},
        headers=auth_headers,
    )
    client.post(f"/v1/tests/attempts/{attempt_id}/finish", headers=auth_headers)
    return attempt_id


class TestUserAdministration:
    """Tests for /v1/admin/users and role endpoints."""

    def test_list_users(self, client, admin_headers, test_user):
        """Test that users are listed with their roles."""
        response = client.get("/v1/admin/users", headers=admin_headers)

        assert response.status_code == 200
        by_username = {user["username"]: user for user in response.json()}
        assert by_username["taker"]["roles"] == ["USER"]
        assert by_username["admin"]["roles"] == ["ADMIN"]
        assert "password_hash" not in by_username["taker"]

    def test_assign_role(self, client, admin_headers, db_session, test_user):
        """Test granting ADMIN to a test-taker."""
        response = client.post(
            "/v1/admin/assign-role",
            json={"user_id": test_user.id, "role_name": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        db_session.refresh(test_user)
        assert sorted(test_user.role_names) == ["ADMIN", "USER"]

    def test_assign_role_twice(self, client, admin_headers, test_user):
        """Test that granting a held role conflicts."""
        response = client.post(
            "/v1/admin/assign-role",
            json={"user_id": test_user.id, "role_name": "USER"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_assign_unknown_role(self, client, admin_headers, test_user):
        """Test granting a role that does not exist."""
        response = client.post(
            "/v1/admin/assign-role",
            json={"user_id": test_user.id, "role_name": "OWNER"},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Role 'OWNER' not found."

    def test_revoke_role(self, client, admin_headers, db_session, test_user):
        """Test revoking a held role."""
        response = client.delete(
            f"/v1/admin/users/{test_user.id}/roles/user", headers=admin_headers
        )

        assert response.status_code == 200
        db_session.refresh(test_user)
        assert test_user.role_names == []

    def test_revoke_role_not_held(self, client, admin_headers, test_user):
        """Test revoking a role the user does not have."""
        response = client.delete(
            f"/v1/admin/users/{test_user.id}/roles/ADMIN", headers=admin_headers
        )

        assert response.status_code == 404

    def test_delete_user(self, client, admin_headers, db_session, test_user):
        """Test deleting another user's account."""
        user_id = test_user.id

        response = client.delete(f"/v1/admin/users/{user_id}", headers=admin_headers)

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(User, user_id) is None

    def test_cannot_delete_self(self, client, admin_headers, admin_user):
        """Test that an admin cannot delete their own account."""
        response = client.delete(
            f"/v1/admin/users/{admin_user.id}", headers=admin_headers
        )

        assert response.status_code == 403
        assert "your own account" in response.json()["detail"]

    def test_delete_unknown_user(self, client, admin_headers):
        """Test deleting a user that does not exist."""
        response = client.delete("/v1/admin/users/999", headers=admin_headers)

        assert response.status_code == 404


class TestTemplateBuilder:
    """Tests for /v1/admin/tests/templates."""

    def test_create_template_shell(self, client, admin_headers):
        """Test that a template starts with three empty sections."""
        response = client.post(
            "/v1/admin/tests/templates",
            json={"title": "Final Exam", "description": "June sitting"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Final Exam"
        assert sorted(section["type"] for section in data["sections"]) == [
            "LISTENING",
            "READING",
            "WRITING",
        ]
        assert all(section["answers"] == {} for section in data["sections"])

    @pytest.mark.parametrize("body", [{}, {"title": "   "}])
    def test_create_template_requires_title(self, client, admin_headers, body):
        """Test that a title is required."""
        response = client.post(
            "/v1/admin/tests/templates", json=body, headers=admin_headers
        )

        assert response.status_code == 422

    def test_update_section(self, client, admin_headers, test_template):
        """Test replacing a section's content and answer key."""
        response = client.patch(
            f"/v1/admin/tests/templates/{test_template.id}/sections/reading",
            json={
                "content": {"passageText": "Rome was not built in a day.", "blocks": []},
                "answers": {"q1": "Rome"},
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "READING"
        assert data["answers"] == {"q1": "Rome"}
        assert data["content"]["passageText"] == "Rome was not built in a day."

    def test_update_unknown_section(self, client, admin_headers, test_template):
        """Test editing a section type that does not exist."""
        response = client.patch(
            f"/v1/admin/tests/templates/{test_template.id}/sections/SPEAKING",
            json={"content": {}},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_list_and_get_templates(self, client, admin_headers, test_template):
        """Test listing templates and loading one with answer keys."""
        listed = client.get("/v1/admin/tests/templates", headers=admin_headers)
        detail = client.get(
            f"/v1/admin/tests/templates/{test_template.id}", headers=admin_headers
        )

        assert [t["id"] for t in listed.json()] == [test_template.id]
        assert "sections" not in listed.json()[0]
        by_type = {s["type"]: s for s in detail.json()["sections"]}
        assert by_type["READING"]["answers"] == READING_KEY

    def test_get_unknown_template(self, client, admin_headers):
        """Test loading a template that does not exist."""
        response = client.get("/v1/admin/tests/templates/999", headers=admin_headers)

        assert response.status_code == 404

    def test_delete_template_cascades(
        self, client, admin_headers, db_session, test_template, completed_attempt_id
    ):
        """Test that deleting a template removes its schedules and attempts."""
        response = client.delete(
            f"/v1/admin/tests/templates/{test_template.id}", headers=admin_headers
        )

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(TestTemplate).count() == 0
        assert db_session.query(ScheduledTest).count() == 0
        assert db_session.query(TestAttempt).count() == 0


class TestScheduling:
    """Tests for /v1/admin/tests/schedule and /v1/admin/tests/scheduled."""

    def test_schedule_template(self, client, admin_headers, test_template):
        """Test scheduling a template for a window."""
        response = client.post(
            "/v1/admin/tests/schedule",
            json={
                "test_template_id": test_template.id,
                "start_time": "2026-06-01T09:00:00Z",
                "end_time": "2026-06-01T11:00:00Z",
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["test_template_id"] == test_template.id
        assert data["is_active"] is True

    def test_missing_fields(self, client, admin_headers, test_template):
        """Test that template and window are required."""
        response = client.post(
            "/v1/admin/tests/schedule",
            json={"test_template_id": test_template.id},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "required" in response.json()["detail"]

    def test_inverted_window(self, client, admin_headers, test_template):
        """Test that end before start is rejected."""
        response = client.post(
            "/v1/admin/tests/schedule",
            json={
                "test_template_id": test_template.id,
                "start_time": "2026-06-01T11:00:00Z",
                "end_time": "2026-06-01T09:00:00Z",
            },
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_unknown_template(self, client, admin_headers):
        """Test scheduling a template that does not exist."""
        response = client.post(
            "/v1/admin/tests/schedule",
            json={
                "test_template_id": 999,
                "start_time": "2026-06-01T09:00:00Z",
                "end_time": "2026-06-01T11:00:00Z",
            },
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_list_scheduled(self, client, admin_headers, scheduled_test):
        """Test listing schedules with their template."""
        response = client.get("/v1/admin/tests/scheduled", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert [s["id"] for s in data] == [scheduled_test.id]
        assert data[0]["test_template"]["title"] == "Mock Exam"

    def test_kill_switch_hides_schedule(
        self, client, admin_headers, auth_headers, scheduled_test
    ):
        """Test that disabling a schedule removes it from available tests."""
        response = client.patch(
            f"/v1/admin/tests/scheduled/{scheduled_test.id}",
            json={"is_active": False},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        available = client.get("/v1/tests/available", headers=auth_headers)
        assert available.json() == []

    def test_update_unknown_schedule(self, client, admin_headers):
        """Test toggling a schedule that does not exist."""
        response = client.patch(
            "/v1/admin/tests/scheduled/999",
            json={"is_active": True},
            headers=admin_headers,
        )

        assert response.status_code == 404


class TestAttemptReview:
    """Tests for /v1/admin/attempts."""

    def test_list_completed_attempts(
        self, client, admin_headers, completed_attempt_id
    ):
        """Test that completed attempts are listed with owner contact details."""
        response = client.get("/v1/admin/attempts", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data] == [completed_attempt_id]
        assert data[0]["results"] == {"LISTENING": 0, "READING": 1}
        assert data[0]["user"]["email"] == "taker@example.com"
        assert data[0]["scheduled_test"]["test_template"]["title"] == "Mock Exam"

    def test_in_progress_attempts_not_listed(
        self, client, admin_headers, auth_headers, scheduled_test
    ):
        """Test that unfinished attempts are excluded."""
        client.post(f"/v1/tests/{scheduled_test.id}/start", headers=auth_headers)

        response = client.get("/v1/admin/attempts", headers=admin_headers)

        assert response.json() == []

    def test_attempt_detail_includes_answer_key(
        self, client, admin_headers, completed_attempt_id
    ):
        """Test that admins see the answer key for review."""
        response = client.get(
            f"/v1/admin/attempts/{completed_attempt_id}", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_answers"] == {"READING": {"q1": "Paris"}}
        by_type = {
            s["type"]: s for s in data["scheduled_test"]["test_template"]["sections"]
        }
        assert by_type["READING"]["answers"] == READING_KEY

    def test_attempt_detail_unknown(self, client, admin_headers):
        """Test loading an attempt that does not exist."""
        response = client.get("/v1/admin/attempts/999", headers=admin_headers)

        assert response.status_code == 404
