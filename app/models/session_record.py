"""ORM mapping of the server-side session table.

The table itself is created by app.services.bootstrap.initialize_session_table,
not by Alembic, so several instances can start against the same database.
"""

from sqlalchemy import JSON, Column, DateTime, Index, String

from app.models.base import Base

SESSION_TABLE_NAME = "session"
SESSION_EXPIRE_INDEX = "IDX_session_expire"


class SessionRecord(Base):
    __tablename__ = SESSION_TABLE_NAME
    __table_args__ = (Index(SESSION_EXPIRE_INDEX, "expire"),)

    sid = Column(String, primary_key=True)
    sess = Column(JSON, nullable=False)
    # Naive UTC timestamp, matching the timestamp(6) column created at bootstrap.
    expire = Column(DateTime(timezone=False), nullable=False)
