"""Core configuration, database access and password/session security helpers."""

from app.core.config import Settings, get_settings, settings
from app.core.database import SessionLocal, get_db, sqlstate

__all__ = ["Settings", "SessionLocal", "get_settings", "get_db", "settings", "sqlstate"]
