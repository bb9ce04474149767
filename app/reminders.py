"""
CLI entrypoint for the membership expiration reminder job. Run from cron when
the in-process scheduler is disabled (SCHEDULER_ENABLED=false), e.g.:

  python -m app.reminders

Or daily at 09:00: 0 9 * * * cd /path/to/readersden && .venv/bin/python -m app.reminders
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.reminders import run_expiration_reminders

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Send reminders to students whose membership ends REMINDER_DAYS_BEFORE days from today."""
    settings = get_settings()
    db = SessionLocal()
    try:
        sent, failed = run_expiration_reminders(db, settings)
        logger.info("Reminders completed: sent=%s, failed=%s", sent, failed)
        return 0 if failed == 0 else 1
    except Exception as e:
        logger.exception("Reminder job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
