from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Text, Boolean, JSON, Uuid
from sqlalchemy.orm import relationship
import enum

from apace.database import Base, utcnow


class NotificationType(str, enum.Enum):
    BOOKING_CONFIRMED = "booking_confirmed"
    DRIVER_ASSIGNED = "driver_assigned"
    PICKUP_COMPLETED = "pickup_completed"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    DELAYED = "delayed"
    FAILED = "failed"
    NEW_ASSIGNMENT = "new_assignment"
    PICKUP_REMINDER = "pickup_reminder"
    PAYMENT_RECEIVED = "payment_received"
    DOCUMENTS_VERIFIED = "documents_verified"
    DOCUMENTS_REJECTED = "documents_rejected"
    ADMIN_BROADCAST = "admin_broadcast"
    GENERAL = "general"


class NotificationStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    READ = "read"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class DevicePlatform(str, enum.Enum):
    ANDROID = "android"
    IOS = "ios"
    WEB = "web"


class Notification(Base):
    """Append-only log of alerts sent to a user or a driver."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True)
    driver_id = Column(Uuid, ForeignKey("drivers.id", ondelete="CASCADE"), index=True, nullable=True)
    shipment_id = Column(Uuid, ForeignKey("shipments.id", ondelete="SET NULL"), index=True, nullable=True)
    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    channels = Column(JSON, nullable=False, default=lambda: ["push"])
    status = Column(Enum(NotificationStatus), default=NotificationStatus.PENDING, index=True, nullable=False)
    priority = Column(Enum(NotificationPriority), default=NotificationPriority.NORMAL, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    read_at = Column(DateTime, nullable=True)
    fcm_message_id = Column(String(255), nullable=True)
    fcm_response = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
    scheduled_for = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class DeviceToken(Base):
    __tablename__ = "device_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True)
    driver_id = Column(Uuid, ForeignKey("drivers.id", ondelete="CASCADE"), index=True, nullable=True)
    token = Column(String(512), unique=True, nullable=False)
    platform = Column(Enum(DevicePlatform), default=DevicePlatform.ANDROID, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_used = Column(DateTime, default=utcnow, nullable=False)
    device_info = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="device_tokens")
    driver = relationship("Driver", back_populates="device_tokens")
