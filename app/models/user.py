"""ORM model for application users (session auth and permission checks)."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.dialects.postgresql import JSONB

from app.models.base import Base


class User(Base):
    """
    Staff account for session authentication and permission-based access control.

    role: one role per user ('admin', 'staff', or any role configured in ROLE_PERMISSIONS).
    permissions: optional explicit permission names granted on top of the role defaults.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="staff", index=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    permissions = Column(JSONB, nullable=True)
