"""ORM model for key/value application settings editable by admins."""

from sqlalchemy import Column, String, Text

from app.models.base import Base

# Settings key holding the Brevo template used for membership expiration reminders.
BREVO_TEMPLATE_ID_KEY = "brevo_template_id"


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
