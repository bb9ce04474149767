"""ORM model for library students (membership holders)."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from app.models.base import Base


class Student(Base):
    """
    Library member. membership_end drives the expiration reminder emails.
    """

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    branch_id = Column(
        Integer,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    membership_end = Column(Date, nullable=True, index=True)
    profile_image_url = Column(String(1024), nullable=True)
