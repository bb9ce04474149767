"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.branch import Branch
from app.models.session_record import SESSION_TABLE_NAME, SessionRecord
from app.models.setting import BREVO_TEMPLATE_ID_KEY, Setting
from app.models.student import Student
from app.models.user import User

__all__ = [
    "BREVO_TEMPLATE_ID_KEY",
    "Base",
    "Branch",
    "SESSION_TABLE_NAME",
    "SessionRecord",
    "Setting",
    "Student",
    "User",
]
