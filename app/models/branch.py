"""ORM model for library branches."""

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    code = Column(String(64), nullable=True)
