"""Unit tests for app.services.email: Brevo reminder payload and error mapping."""

import unittest
from datetime import date
from unittest.mock import MagicMock

import httpx
from pydantic import SecretStr

from app.services.email import (
    EmailApiError,
    EmailNotConfiguredError,
    ReminderRecipient,
    build_reminder_payload,
    send_expiration_reminder,
)

RECIPIENT = ReminderRecipient(email="s@example.com", name="Sam", membership_end=date(2025, 12, 31))


def _settings(api_key: str | None = "key", sender: str | None = "library@example.com") -> MagicMock:
    settings = MagicMock()
    settings.BREVO_API_KEY = SecretStr(api_key) if api_key is not None else None
    settings.BREVO_SENDER_EMAIL = sender
    settings.BREVO_SENDER_NAME = "Readers Den"
    settings.BREVO_BASE_URL = "https://api.brevo.com/v3"
    settings.BREVO_REQUEST_TIMEOUT_SEC = 10.0
    return settings


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestBuildReminderPayload(unittest.TestCase):
    def test_template_and_params(self) -> None:
        payload = build_reminder_payload(RECIPIENT, 12, _settings())
        self.assertEqual(payload["templateId"], 12)
        self.assertEqual(payload["to"], [{"email": "s@example.com", "name": "Sam"}])
        self.assertEqual(payload["params"], {"name": "Sam", "membership_end": "2025-12-31"})
        self.assertEqual(payload["sender"]["email"], "library@example.com")

    def test_string_membership_end_passed_through(self) -> None:
        recipient = ReminderRecipient(email="t@example.com", name="T", membership_end="2025-01-01")
        payload = build_reminder_payload(recipient, 1, _settings())
        self.assertEqual(payload["params"]["membership_end"], "2025-01-01")


class TestSendExpirationReminder(unittest.TestCase):
    def test_not_configured_without_key(self) -> None:
        with self.assertRaises(EmailNotConfiguredError):
            send_expiration_reminder(RECIPIENT, 1, _settings(api_key=None))

    def test_not_configured_without_sender(self) -> None:
        with self.assertRaises(EmailNotConfiguredError):
            send_expiration_reminder(RECIPIENT, 1, _settings(sender=""))

    def test_sends_with_api_key_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"messageId": "<abc@brevo>"})

        with _client(handler) as client:
            message_id = send_expiration_reminder(RECIPIENT, 5, _settings(), client=client)
        self.assertEqual(message_id, "<abc@brevo>")
        self.assertEqual(str(seen[0].url), "https://api.brevo.com/v3/smtp/email")
        self.assertEqual(seen[0].headers["api-key"], "key")

    def test_401_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Key not found"})

        with _client(handler) as client:
            with self.assertRaises(EmailApiError) as ctx:
                send_expiration_reminder(RECIPIENT, 5, _settings(), client=client)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_400_includes_brevo_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": "invalid_parameter", "message": "Template not found"})

        with _client(handler) as client:
            with self.assertRaises(EmailApiError) as ctx:
                send_expiration_reminder(RECIPIENT, 5, _settings(), client=client)
        self.assertIn("Template not found", ctx.exception.message)

    def test_transport_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            with self.assertRaises(EmailApiError):
                send_expiration_reminder(RECIPIENT, 5, _settings(), client=client)


if __name__ == "__main__":
    unittest.main()
