"""Send transactional template emails through the Brevo API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(Exception):
    """Raised when an email is sent but BREVO_API_KEY or BREVO_SENDER_EMAIL is missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class EmailApiError(Exception):
    """Raised when Brevo returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class ReminderRecipient:
    """The fields of a student that the reminder template needs."""

    email: str
    name: str
    membership_end: date | str


def _is_brevo_configured(settings: Settings) -> bool:
    if settings.BREVO_API_KEY is None:
        return False
    if not settings.BREVO_API_KEY.get_secret_value().strip():
        return False
    return bool(settings.BREVO_SENDER_EMAIL and settings.BREVO_SENDER_EMAIL.strip())


def build_reminder_payload(
    recipient: ReminderRecipient,
    template_id: int,
    settings: Settings,
) -> dict[str, Any]:
    """Request body for POST /smtp/email with the reminder template params."""
    membership_end = recipient.membership_end
    if isinstance(membership_end, date):
        membership_end = membership_end.isoformat()
    return {
        "sender": {
            "email": (settings.BREVO_SENDER_EMAIL or "").strip(),
            "name": settings.BREVO_SENDER_NAME,
        },
        "to": [{"email": recipient.email, "name": recipient.name}],
        "templateId": template_id,
        "params": {
            "name": recipient.name,
            "membership_end": membership_end,
        },
    }


def send_expiration_reminder(
    recipient: ReminderRecipient,
    template_id: int,
    settings: Settings,
    client: httpx.Client | None = None,
) -> str | None:
    """
    Send the membership expiration reminder to one recipient.

    Returns the Brevo message id when present. Raises EmailNotConfiguredError
    or EmailApiError.
    """
    if not _is_brevo_configured(settings):
        raise EmailNotConfiguredError("Brevo is not configured; set BREVO_API_KEY and BREVO_SENDER_EMAIL.")
    url = f"{settings.BREVO_BASE_URL}/smtp/email"
    headers = {
        "api-key": settings.BREVO_API_KEY.get_secret_value().strip(),
        "accept": "application/json",
    }
    payload = build_reminder_payload(recipient, template_id, settings)

    owns_client = client is None
    if client is None:
        client = httpx.Client()
    try:
        resp = client.post(
            url,
            json=payload,
            headers=headers,
            timeout=settings.BREVO_REQUEST_TIMEOUT_SEC,
        )
    except httpx.HTTPError as e:
        raise EmailApiError(f"Brevo request failed: {e!s}") from e
    finally:
        if owns_client:
            client.close()

    if resp.status_code == 401:
        raise EmailApiError("Brevo authentication failed (invalid API key).", 401)
    if resp.status_code >= 400:
        try:
            body = resp.json()
            detail = body.get("message") or json.dumps(body)[:500]
        except ValueError:
            detail = resp.text[:500] if resp.text else "Unknown error"
        raise EmailApiError(f"Brevo returned {resp.status_code}: {detail}", resp.status_code)

    try:
        message_id = resp.json().get("messageId")
    except ValueError:
        message_id = None
    logger.info("Expiration reminder sent to %s (template %s)", recipient.email, template_id)
    return message_id
