"""Route tests for admin-only endpoints: users, settings and the test email."""

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from app.api.v1.auth import get_current_user, get_permission_registry
from app.core.database import get_db
from app.main import app
from app.models import Setting, User
from app.schemas.auth import CurrentUser
from app.services.email import EmailApiError
from app.services.permissions import PermissionRegistry


class AdminRouteTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = MagicMock()
        app.dependency_overrides[get_db] = lambda: self.db
        self._as("admin")
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _as(self, role: str) -> None:
        user = CurrentUser(id=1, username="boss", role=role)
        app.dependency_overrides[get_current_user] = lambda: user


class TestUsers(AdminRouteTestCase):
    def test_staff_forbidden(self) -> None:
        self._as("staff")
        self.assertEqual(self.client.get("/api/users").status_code, 403)

    def test_list(self) -> None:
        self.db.query.return_value.order_by.return_value.all.return_value = [
            User(id=1, username="boss", password_hash="h", role="admin"),
        ]
        resp = self.client.get("/api/users")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["users"][0]["username"], "boss")
        self.assertNotIn("password_hash", resp.json()["users"][0])

    def test_set_permissions(self) -> None:
        user = User(id=4, username="desk", password_hash="h", role="staff")
        self.db.get.return_value = user
        resp = self.client.put(
            "/api/users/4/permissions",
            json={"permissions": ["manage_branches", "manage_branches", "view_reports"]},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(user.permissions, ["manage_branches", "view_reports"])
        self.db.commit.assert_called_once()

    def test_clear_permissions(self) -> None:
        user = User(id=4, username="desk", password_hash="h", role="staff", permissions=["view_reports"])
        self.db.get.return_value = user
        resp = self.client.put("/api/users/4/permissions", json={"permissions": None})
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(user.permissions)

    def test_unknown_permission_rejected(self) -> None:
        resp = self.client.put("/api/users/4/permissions", json={"permissions": ["launch_rockets"]})
        self.assertEqual(resp.status_code, 422)
        self.db.commit.assert_not_called()

    def test_role_defined_permission_accepted(self) -> None:
        registry = PermissionRegistry(roles={"librarian": {"manage_catalogue"}})
        app.dependency_overrides[get_permission_registry] = lambda: registry
        user = User(id=4, username="clerk", role="staff")
        self.db.get.return_value = user
        resp = self.client.put("/api/users/4/permissions", json={"permissions": ["manage_catalogue"]})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(user.permissions, ["manage_catalogue"])

    def test_missing_user(self) -> None:
        self.db.get.return_value = None
        resp = self.client.put("/api/users/4/permissions", json={"permissions": []})
        self.assertEqual(resp.status_code, 404)


class TestSettings(AdminRouteTestCase):
    def test_list(self) -> None:
        self.db.query.return_value.order_by.return_value.all.return_value = [
            Setting(key="brevo_template_id", value="3"),
        ]
        resp = self.client.get("/api/settings")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"settings": [{"key": "brevo_template_id", "value": "3"}]})

    def test_upsert_new(self) -> None:
        self.db.get.return_value = None
        resp = self.client.put("/api/settings/brevo_template_id", json={"value": "8"})
        self.assertEqual(resp.status_code, 200)
        added = self.db.add.call_args[0][0]
        self.assertEqual((added.key, added.value), ("brevo_template_id", "8"))

    def test_upsert_existing(self) -> None:
        row = Setting(key="brevo_template_id", value="3")
        self.db.get.return_value = row
        self.client.put("/api/settings/brevo_template_id", json={"value": "8"})
        self.assertEqual(row.value, "8")
        self.db.add.assert_not_called()

    def test_staff_forbidden(self) -> None:
        self._as("staff")
        self.assertEqual(self.client.get("/api/settings").status_code, 403)


class TestTestEmail(AdminRouteTestCase):
    def test_template_not_set(self) -> None:
        self.db.get.return_value = None
        resp = self.client.get("/api/test-email")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Brevo template ID not set in settings")

    @patch("app.api.v1.settings.send_expiration_reminder")
    def test_sends(self, mock_send: MagicMock) -> None:
        self.db.get.return_value = Setting(key="brevo_template_id", value="12")
        resp = self.client.get("/api/test-email")
        self.assertEqual(resp.status_code, 200)
        recipient, template_id, _ = mock_send.call_args[0]
        self.assertEqual(recipient.email, "test@example.com")
        self.assertEqual(template_id, 12)

    @patch("app.api.v1.settings.send_expiration_reminder", side_effect=EmailApiError("down", 500))
    def test_brevo_failure(self, _send: MagicMock) -> None:
        self.db.get.return_value = Setting(key="brevo_template_id", value="12")
        resp = self.client.get("/api/test-email")
        self.assertEqual(resp.status_code, 502)


class TestApiRoot(AdminRouteTestCase):
    def test_message(self) -> None:
        resp = self.client.get("/api")
        self.assertEqual(resp.json(), {"message": "Student Management API"})


if __name__ == "__main__":
    unittest.main()
