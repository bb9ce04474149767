"""Membership expiration reminders: find students whose membership ends soon and email them."""

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.models import BREVO_TEMPLATE_ID_KEY, Setting, Student
from app.services.email import (
    EmailApiError,
    EmailNotConfiguredError,
    ReminderRecipient,
    send_expiration_reminder,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class ReminderTemplateError(Exception):
    """Raised when the brevo_template_id setting is missing or not a number."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def read_template_id(db: Session) -> int:
    """Return the reminder template id stored in the settings table."""
    row = db.get(Setting, BREVO_TEMPLATE_ID_KEY)
    if row is None or row.value is None or not row.value.strip():
        raise ReminderTemplateError("Brevo template ID not set in settings")
    try:
        return int(row.value.strip())
    except ValueError:
        raise ReminderTemplateError("Brevo template ID is not a valid number in settings") from None


def students_due_for_reminder(db: Session, target: date) -> list[Student]:
    """Students with an email whose membership ends exactly on target."""
    return (
        db.query(Student)
        .filter(Student.membership_end == target)
        .filter(Student.email.isnot(None))
        .filter(Student.email != "")
        .order_by(Student.id)
        .all()
    )


def run_expiration_reminders(
    db: Session,
    settings: "Settings",
    today: date | None = None,
) -> tuple[int, int]:
    """
    Email every student whose membership ends REMINDER_DAYS_BEFORE days from today.

    Matching a single day keeps a daily run from emailing the same student
    twice. A failed send is logged and the run continues. Returns (sent, failed).
    """
    if not settings.REMINDERS_ENABLED:
        logger.info("Reminders are disabled (REMINDERS_ENABLED=false); skipping.")
        return (0, 0)

    try:
        template_id = read_template_id(db)
    except ReminderTemplateError as e:
        logger.warning("Skipping expiration reminders: %s", e.message)
        return (0, 0)

    today = today or date.today()
    target = today + timedelta(days=settings.REMINDER_DAYS_BEFORE)
    students = students_due_for_reminder(db, target)

    sent = 0
    failed = 0
    for student in students:
        recipient = ReminderRecipient(
            email=student.email,
            name=student.name,
            membership_end=student.membership_end,
        )
        try:
            send_expiration_reminder(recipient, template_id, settings)
            sent += 1
        except EmailNotConfiguredError as e:
            logger.warning("Skipping expiration reminders: %s", e.message)
            return (sent, failed + len(students) - sent)
        except EmailApiError as e:
            failed += 1
            logger.error("Reminder to student %s failed: %s", student.id, e.message)

    logger.info(
        "Expiration reminders for %s: students=%s, sent=%s, failed=%s",
        target.isoformat(),
        len(students),
        sent,
        failed,
    )
    return (sent, failed)
