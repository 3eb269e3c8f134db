from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from apace.database import get_db
from apace.core.deps import Principal, get_current_principal, require_admin
from apace.core.pagination import paginate
from apace.models.notification_model import NotificationStatus, NotificationType
from apace.schemas.common import Envelope, MessageResponse
from apace.schemas.notification import AdminNotificationSend, DeviceTokenCreate, DeviceTokenRead, NotificationRead
from apace.services import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
admin_router = APIRouter(prefix="/api/admin/notifications", tags=["Admin - Notifications"])


# ----------------------------------------
# Device tokens
# ----------------------------------------

@router.post("/device-tokens", response_model=Envelope[DeviceTokenRead], status_code=status.HTTP_201_CREATED)
def register_device_token(
    device: DeviceTokenCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    registered = notification_service.register_device_token(
        db, principal, device.token, device.platform, device.device_info
    )
    return {"message": "Device token registered", "data": registered}


@router.delete("/device-tokens/{token}", response_model=MessageResponse)
def deactivate_device_token(
    token: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    notification_service.deactivate_device_token(db, principal, token)
    return {"message": "Device token removed"}


# ----------------------------------------
# Inbox
# ----------------------------------------

@router.get("", response_model=Envelope[List[NotificationRead]])
def my_notifications(
    unread: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    query = notification_service.list_notifications(db, principal, unread_only=unread)
    notifications, pagination = paginate(query, page, limit)
    return {"data": notifications, "pagination": pagination}


@router.patch("/{notification_id}/read", response_model=Envelope[NotificationRead])
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return {"data": notification_service.mark_read(db, principal, notification_id)}


# ----------------------------------------
# Admin
# ----------------------------------------

@admin_router.post("/send", response_model=Envelope[NotificationRead], status_code=status.HTTP_201_CREATED)
def send_notification(
    notification: AdminNotificationSend,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Send a one-off push to a customer or driver. Delivery failure is recorded, not raised."""
    sent = notification_service.send_admin_notification(db, notification)
    return {"message": f"Notification {sent.status.value}", "data": sent}


@admin_router.get("", response_model=Envelope[List[NotificationRead]])
def notification_history(
    notification_type: Optional[NotificationType] = Query(None, alias="type"),
    notification_status: Optional[NotificationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    query = notification_service.notification_history(db, notification_type, notification_status)
    notifications, pagination = paginate(query, page, limit)
    return {"data": notifications, "pagination": pagination}
