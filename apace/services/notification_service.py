import logging
import uuid
from typing import List, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from apace.core.deps import Role
from apace.core.errors import NotFoundError
from apace.database import utcnow
from apace.models.notification_model import (
    DeviceToken,
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from apace.models.driver_model import Driver
from apace.models.shipment_model import Shipment, ShipmentStatus
from apace.models.user_model import User

logger = logging.getLogger(__name__)


class PushDeliveryError(Exception):
    pass


class PushGateway:
    """
    Stand-in for the FCM client. Messages are written to the log and a
    synthetic message id is returned, so the notification log behaves the
    same way it would against the real provider.
    """

    def send(self, token: str, title: str, body: str, data: Optional[dict] = None) -> str:
        message_id = f"local-{uuid.uuid4().hex}"
        logger.info("[PUSH] %s -> %s...: %s | %s", message_id, token[:12], title, body)
        return message_id


push_gateway = PushGateway()


TEMPLATES = {
    NotificationType.BOOKING_CONFIRMED: (
        "Booking Confirmed",
        "Your booking {tracking_number} has been confirmed for pickup at {pickup_address}",
    ),
    NotificationType.DRIVER_ASSIGNED: (
        "Driver Assigned",
        "{driver_name} will pick up your shipment {tracking_number}. Vehicle: {vehicle_number}",
    ),
    NotificationType.PICKUP_COMPLETED: (
        "Pickup Completed",
        "Your shipment has been picked up and is on the way to {delivery_address}",
    ),
    NotificationType.IN_TRANSIT: (
        "In Transit",
        "Your shipment {tracking_number} is on the way to {delivery_address}",
    ),
    NotificationType.OUT_FOR_DELIVERY: (
        "Out for Delivery",
        "Your shipment {tracking_number} is out for delivery to {delivery_address}",
    ),
    NotificationType.DELIVERED: (
        "Delivered Successfully",
        "Your shipment has been delivered successfully to {delivery_address}",
    ),
    NotificationType.CANCELLED: (
        "Shipment Cancelled",
        "Your shipment from {pickup_address} to {delivery_address} has been cancelled",
    ),
    NotificationType.DELAYED: (
        "Delivery Delayed",
        "Your delivery to {delivery_address} is delayed",
    ),
    NotificationType.FAILED: (
        "Delivery Failed",
        "We could not deliver your shipment {tracking_number}. Please contact support",
    ),
    NotificationType.NEW_ASSIGNMENT: (
        "New Shipment Assignment",
        "New shipment assigned: pickup from {pickup_address} to {delivery_address}",
    ),
    NotificationType.PICKUP_REMINDER: (
        "Pickup Reminder",
        "Reminder: pickup at {pickup_address}",
    ),
    NotificationType.PAYMENT_RECEIVED: (
        "Payment Received",
        "Payment of {amount} received for your shipment. Thank you!",
    ),
    NotificationType.DOCUMENTS_VERIFIED: (
        "Documents Verified",
        "Your documents have been verified. You can now receive shipments",
    ),
    NotificationType.DOCUMENTS_REJECTED: (
        "Documents Rejected",
        "Your documents were rejected: {reason}",
    ),
}

# Shipment status -> notification sent to the customer
STATUS_NOTIFICATIONS = {
    ShipmentStatus.IN_TRANSIT: NotificationType.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY: NotificationType.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED: NotificationType.DELIVERED,
    ShipmentStatus.FAILED: NotificationType.FAILED,
    ShipmentStatus.CANCELLED: NotificationType.CANCELLED,
}


def render_template(notification_type: NotificationType, **context) -> tuple:
    title, body = TEMPLATES[notification_type]
    return title, body.format(**context)


def _active_tokens(db: Session, user_id=None, driver_id=None) -> List[DeviceToken]:
    query = db.query(DeviceToken).filter(DeviceToken.is_active.is_(True))
    if user_id is not None:
        query = query.filter(DeviceToken.user_id == user_id)
    else:
        query = query.filter(DeviceToken.driver_id == driver_id)
    return query.all()


OUTBOX_KEY = "notification_outbox"


@event.listens_for(Session, "after_rollback")
def _discard_outbox(session: Session) -> None:
    dropped = session.info.pop(OUTBOX_KEY, None)
    if dropped:
        logger.info("Dropped %d undelivered notification(s) on rollback", len(dropped))


def notify(
    db: Session,
    notification_type: NotificationType,
    title: str,
    body: str,
    user_id=None,
    driver_id=None,
    shipment_id=None,
    data: Optional[dict] = None,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> Notification:
    """
    Record a notification and queue it for push delivery.

    Exactly one of user_id / driver_id must be given. The row is added to
    the caller's session and stays pending; nothing is pushed until the
    caller commits and calls deliver_pending(). A rollback discards the
    queue.

    Returns:
        The pending Notification row
    """
    if (user_id is None) == (driver_id is None):
        raise ValueError("A notification needs exactly one recipient")

    notification = Notification(
        user_id=user_id,
        driver_id=driver_id,
        shipment_id=shipment_id,
        type=notification_type,
        title=title,
        body=body,
        data=data or {},
        channels=["push"],
        status=NotificationStatus.PENDING,
        priority=priority,
    )
    db.add(notification)
    db.info.setdefault(OUTBOX_KEY, []).append(notification)
    return notification


def deliver_pending(db: Session) -> None:
    """Push the notifications queued in the transaction that just committed."""
    outbox = [n for n in db.info.pop(OUTBOX_KEY, []) if inspect(n).persistent]
    if not outbox:
        return
    for notification in outbox:
        _dispatch(db, notification)
    db.commit()


def _dispatch(db: Session, notification: Notification) -> None:
    tokens = _active_tokens(db, user_id=notification.user_id, driver_id=notification.driver_id)
    if not tokens:
        notification.status = NotificationStatus.FAILED
        notification.error = "No active device tokens for recipient"
        logger.info("Notification %s recorded without delivery: no device tokens", notification.type.value)
        return

    message_ids = []
    errors = []
    for device in tokens:
        try:
            message_ids.append(
                push_gateway.send(device.token, notification.title, notification.body, notification.data)
            )
            device.last_used = utcnow()
        except PushDeliveryError as exc:
            errors.append(str(exc))
            logger.warning("Push delivery to device %s failed: %s", device.id, exc)

    if message_ids:
        notification.status = NotificationStatus.SENT
        notification.sent_at = utcnow()
        notification.fcm_message_id = message_ids[0]
    else:
        notification.status = NotificationStatus.FAILED
        notification.error = "; ".join(errors)
    notification.fcm_response = {
        "successCount": len(message_ids),
        "failureCount": len(errors),
        "messageIds": message_ids,
    }


def _shipment_context(shipment: Shipment) -> dict:
    return {
        "tracking_number": shipment.tracking_number,
        "pickup_address": shipment.pickup_address,
        "delivery_address": shipment.delivery_address,
    }


def notify_booking_confirmed(db: Session, shipment: Shipment) -> Optional[Notification]:
    if shipment.user_id is None:
        return None
    title, body = render_template(NotificationType.BOOKING_CONFIRMED, **_shipment_context(shipment))
    return notify(
        db,
        NotificationType.BOOKING_CONFIRMED,
        title,
        body,
        user_id=shipment.user_id,
        shipment_id=shipment.id,
        data={"shipmentId": str(shipment.id), "trackingNumber": shipment.tracking_number},
    )


def notify_assignment(db: Session, shipment: Shipment, driver, vehicle) -> None:
    """Tell the driver about the new job and the customer who is coming."""
    data = {
        "shipmentId": str(shipment.id),
        "trackingNumber": shipment.tracking_number,
        "driverId": str(driver.id),
        "vehicleId": str(vehicle.id),
    }
    title, body = render_template(NotificationType.NEW_ASSIGNMENT, **_shipment_context(shipment))
    notify(
        db,
        NotificationType.NEW_ASSIGNMENT,
        title,
        body,
        driver_id=driver.id,
        shipment_id=shipment.id,
        data=data,
        priority=NotificationPriority.HIGH,
    )

    if shipment.user_id is not None:
        title, body = render_template(
            NotificationType.DRIVER_ASSIGNED,
            driver_name=driver.full_name,
            vehicle_number=vehicle.vehicle_number,
            **_shipment_context(shipment),
        )
        notify(
            db,
            NotificationType.DRIVER_ASSIGNED,
            title,
            body,
            user_id=shipment.user_id,
            shipment_id=shipment.id,
            data=data,
        )


def notify_status_change(db: Session, shipment: Shipment, notes: Optional[str] = None) -> Optional[Notification]:
    notification_type = STATUS_NOTIFICATIONS.get(shipment.status)
    if notification_type is None or shipment.user_id is None:
        return None
    title, body = render_template(notification_type, **_shipment_context(shipment))
    data = {"shipmentId": str(shipment.id), "status": shipment.status.value}
    if notes:
        data["notes"] = notes
    return notify(
        db,
        notification_type,
        title,
        body,
        user_id=shipment.user_id,
        shipment_id=shipment.id,
        data=data,
    )


def notify_documents_reviewed(db: Session, driver, verified: bool, reason: Optional[str] = None) -> Notification:
    if verified:
        notification_type = NotificationType.DOCUMENTS_VERIFIED
        title, body = render_template(notification_type)
    else:
        notification_type = NotificationType.DOCUMENTS_REJECTED
        title, body = render_template(notification_type, reason=reason)
    return notify(db, notification_type, title, body, driver_id=driver.id, priority=NotificationPriority.HIGH)


# Device tokens

def register_device_token(db: Session, principal, token: str, platform, device_info=None) -> DeviceToken:
    """Register a token for the caller; a token seen before moves to the caller."""
    owner = {"user_id": None, "driver_id": None}
    owner["driver_id" if principal.role == Role.DRIVER else "user_id"] = principal.id

    device = db.query(DeviceToken).filter(DeviceToken.token == token).first()
    if device is None:
        device = DeviceToken(token=token)
        db.add(device)
    device.user_id = owner["user_id"]
    device.driver_id = owner["driver_id"]
    device.platform = platform
    device.device_info = device_info
    device.is_active = True
    device.last_used = utcnow()
    db.commit()
    db.refresh(device)
    return device


def deactivate_device_token(db: Session, principal, token: str) -> None:
    column = DeviceToken.driver_id if principal.role == Role.DRIVER else DeviceToken.user_id
    device = db.query(DeviceToken).filter(DeviceToken.token == token, column == principal.id).first()
    if device is None:
        raise NotFoundError("Device token not found")
    device.is_active = False
    db.commit()


# Inbox

def list_notifications(db: Session, principal, unread_only: bool = False):
    column = Notification.driver_id if principal.role == Role.DRIVER else Notification.user_id
    query = db.query(Notification).filter(column == principal.id)
    if unread_only:
        query = query.filter(Notification.read_at.is_(None))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc())


def mark_read(db: Session, principal, notification_id: int) -> Notification:
    column = Notification.driver_id if principal.role == Role.DRIVER else Notification.user_id
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, column == principal.id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    if notification.read_at is None:
        notification.read_at = utcnow()
        notification.status = NotificationStatus.READ
        db.commit()
        db.refresh(notification)
    return notification


# Admin

def send_admin_notification(db: Session, payload) -> Notification:
    if payload.recipient_type.value == "driver":
        recipient = db.get(Driver, payload.recipient_id)
        recipient_kwargs = {"driver_id": payload.recipient_id}
    else:
        recipient = db.get(User, payload.recipient_id)
        recipient_kwargs = {"user_id": payload.recipient_id}
    if recipient is None:
        raise NotFoundError(f"{payload.recipient_type.value.capitalize()} not found")

    notification = notify(
        db,
        NotificationType.ADMIN_BROADCAST,
        payload.title,
        payload.body,
        data=payload.data,
        priority=payload.priority,
        **recipient_kwargs,
    )
    db.commit()
    deliver_pending(db)
    db.refresh(notification)
    logger.info("Admin notification %s sent to %s %s", notification.id, payload.recipient_type.value, payload.recipient_id)
    return notification


def notification_history(db: Session, notification_type=None, status=None):
    query = db.query(Notification)
    if notification_type is not None:
        query = query.filter(Notification.type == notification_type)
    if status is not None:
        query = query.filter(Notification.status == status)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc())
