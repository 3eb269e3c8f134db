from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Enum, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum

from apace.database import Base, utcnow


class Language(str, enum.Enum):
    EN = "EN"
    ES = "ES"


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    email_notifications = Column(Boolean, default=True, nullable=False)
    sms_notifications = Column(Boolean, default=True, nullable=False)
    push_notifications = Column(Boolean, default=True, nullable=False)
    marketing_emails = Column(Boolean, default=False, nullable=False)
    dark_theme = Column(Boolean, default=False, nullable=False)
    language = Column(Enum(Language), default=Language.EN, nullable=False)
    default_vehicle_type = Column(String(50), nullable=True)
    default_payment_method = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="preferences")
