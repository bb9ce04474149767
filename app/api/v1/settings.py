"""Admin-only settings endpoints and the reminder test email."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin
from app.core.config import get_settings
from app.core.database import get_db
from app.models import Setting
from app.schemas.auth import CurrentUser
from app.schemas.settings import (
    SettingItem,
    SettingsResponse,
    SettingUpdateRequest,
    TestEmailResponse,
)
from app.services.email import (
    EmailApiError,
    EmailNotConfiguredError,
    ReminderRecipient,
    send_expiration_reminder,
)
from app.services.reminders import ReminderTemplateError, read_template_id

logger = logging.getLogger(__name__)
router = APIRouter()

TEST_RECIPIENT = ReminderRecipient(
    email="test@example.com",
    name="Test Student",
    membership_end="2025-12-31",
)


@router.get("/settings", response_model=SettingsResponse)
def list_settings(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> SettingsResponse:
    rows = db.query(Setting).order_by(Setting.key).all()
    return SettingsResponse(settings=[SettingItem.model_validate(r) for r in rows])


@router.put("/settings/{key}", response_model=SettingItem)
def upsert_setting(
    key: str,
    body: SettingUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> SettingItem:
    """Create or replace one setting value."""
    key = key.strip()
    if not key or len(key) > 255:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Setting key must be 1-255 characters.",
        )
    row = db.get(Setting, key)
    if row is None:
        row = Setting(key=key, value=body.value)
        db.add(row)
    else:
        row.value = body.value
    db.commit()
    return SettingItem(key=key, value=body.value)


@router.get("/test-email", response_model=TestEmailResponse)
def send_test_email(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> TestEmailResponse:
    """Send the expiration reminder template to a fixed test recipient."""
    try:
        template_id = read_template_id(db)
    except ReminderTemplateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    try:
        send_expiration_reminder(TEST_RECIPIENT, template_id, get_settings())
    except EmailNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    except EmailApiError as e:
        logger.error("Error in test-email endpoint: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to send test email: {e.message}",
        ) from e
    return TestEmailResponse(message="Test email initiated (check Brevo logs/test email inbox)")
