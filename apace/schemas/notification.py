from __future__ import annotations
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime
import enum

from pydantic import Field

from apace.models.notification_model import (
    DevicePlatform,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from apace.schemas.common import CamelModel


class RecipientType(str, enum.Enum):
    USER = "user"
    DRIVER = "driver"


class DeviceTokenCreate(CamelModel):
    token: str = Field(..., min_length=10, max_length=512)
    platform: DevicePlatform = DevicePlatform.ANDROID
    device_info: Optional[Dict[str, Any]] = None


class DeviceTokenRead(CamelModel):
    id: int
    token: str
    platform: DevicePlatform
    is_active: bool
    last_used: datetime


class NotificationRead(CamelModel):
    id: int
    user_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    shipment_id: Optional[UUID] = None
    type: NotificationType
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    channels: List[str]
    status: NotificationStatus
    priority: NotificationPriority
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    error: Optional[str] = None
    created_at: datetime


class AdminNotificationSend(CamelModel):
    recipient_type: RecipientType
    recipient_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    priority: NotificationPriority = NotificationPriority.NORMAL
    data: Optional[Dict[str, Any]] = None
