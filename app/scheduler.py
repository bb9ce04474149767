"""In-process background jobs: daily expiration reminders and the expired-session sweep."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.services.reminders import run_expiration_reminders
from app.services.sessions import purge_expired_sessions

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Keep APScheduler's own per-run logging out of the application log.
logging.getLogger("apscheduler").setLevel(logging.WARNING)

REMINDER_JOB_ID = "expiration_reminders"
SESSION_SWEEP_JOB_ID = "session_sweep"


def reminder_job(settings: "Settings", db_factory: Callable[[], Session] = SessionLocal) -> None:
    db = db_factory()
    try:
        run_expiration_reminders(db, settings)
    except Exception:
        logger.exception("Expiration reminder job failed")
    finally:
        db.close()


def session_sweep_job(db_factory: Callable[[], Session] = SessionLocal) -> None:
    db = db_factory()
    try:
        purge_expired_sessions(db)
    except Exception:
        logger.exception("Session sweep job failed")
    finally:
        db.close()


def setup_cron_jobs(settings: "Settings", start: bool = True) -> BackgroundScheduler | None:
    """
    Register the reminder (daily cron) and session sweep (interval) jobs.

    Returns the scheduler, or None when SCHEDULER_ENABLED is false. The caller
    owns shutdown.
    """
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler is disabled (SCHEDULER_ENABLED=false); cron jobs not started.")
        return None

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        reminder_job,
        trigger="cron",
        hour=settings.REMINDER_CRON_HOUR,
        minute=settings.REMINDER_CRON_MINUTE,
        args=[settings],
        id=REMINDER_JOB_ID,
        name="Membership expiration reminders",
        replace_existing=True,
    )
    scheduler.add_job(
        session_sweep_job,
        trigger="interval",
        minutes=settings.SESSION_SWEEP_INTERVAL_MINUTES,
        id=SESSION_SWEEP_JOB_ID,
        name="Delete expired sessions",
        replace_existing=True,
    )
    if start:
        scheduler.start()
        logger.info(
            "Scheduler started: reminders daily at %02d:%02d, session sweep every %s min",
            settings.REMINDER_CRON_HOUR,
            settings.REMINDER_CRON_MINUTE,
            settings.SESSION_SWEEP_INTERVAL_MINUTES,
        )
    return scheduler
