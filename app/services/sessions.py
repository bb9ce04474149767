"""Server-side session store backed by the "session" table."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from app.core.security import new_session_id
from app.models import SessionRecord

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # The session table stores naive UTC timestamps.
    return datetime.now(UTC).replace(tzinfo=None)


def create_session(db: Session, user_id: int, ttl: timedelta) -> str:
    """Persist a new session for user_id and return its opaque id."""
    now = _utcnow()
    sid = new_session_id()
    db.add(
        SessionRecord(
            sid=sid,
            sess={"user_id": user_id, "created_at": now.isoformat()},
            expire=now + ttl,
        )
    )
    db.commit()
    return sid


def load_session(db: Session, sid: str) -> dict[str, Any] | None:
    """
    Return the session payload, or None when the session is unknown or expired.
    Expired rows found here are deleted immediately.
    """
    record = db.get(SessionRecord, sid)
    if record is None:
        return None
    if record.expire <= _utcnow():
        db.delete(record)
        db.commit()
        return None
    if not isinstance(record.sess, dict):
        logger.warning("Session payload is not an object; ignoring session")
        return None
    return record.sess


def destroy_session(db: Session, sid: str) -> bool:
    """Delete a session (logout). Returns True if a row was removed."""
    deleted = (
        db.query(SessionRecord)
        .filter(SessionRecord.sid == sid)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def purge_expired_sessions(db: Session) -> int:
    """Delete every expired session. Idempotent: safe to run repeatedly."""
    cutoff = _utcnow()
    deleted_count = (
        db.query(SessionRecord)
        .filter(SessionRecord.expire <= cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted_count > 0:
        logger.info("Session sweep: cutoff=%s, sessions_deleted=%s", cutoff.isoformat(), deleted_count)
    return deleted_count
