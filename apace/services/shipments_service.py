import logging
import random
import string
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from apace.core.deps import Principal, Role
from apace.core.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from apace.database import utcnow
from apace.models.driver_model import AvailabilityStatus, Driver
from apace.models.notification_model import NotificationType
from apace.models.shipment_model import (
    BookingUserType,
    PaymentStatus,
    Shipment,
    ShipmentStatus,
    TERMINAL_STATUSES,
)
from apace.models.vehicle_model import VehicleStatus
from apace.services import notification_service, vehicle_service
from apace.services.vehicle_type_service import require_active_type

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "APACE"
TRACKING_ATTEMPTS = 5


def generate_tracking_number() -> str:
    """
    Generate a tracking number
    Format: APACE-YYYYMMDD-XXXXX
    Example: APACE-20250210-A7K9M
    """
    date_part = utcnow().strftime("%Y%m%d")
    random_part = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"{TRACKING_PREFIX}-{date_part}-{random_part}"


def generate_unique_tracking_number(db: Session) -> str:
    for _ in range(TRACKING_ATTEMPTS):
        candidate = generate_tracking_number()
        if not db.query(Shipment.id).filter(Shipment.tracking_number == candidate).first():
            return candidate
        logger.warning("Tracking number collision on %s, retrying", candidate)
    raise ConflictError("Could not allocate a tracking number. Please retry.", retryable=True)


def append_note(shipment: Shipment, note: str) -> None:
    line = f"[{utcnow().strftime('%Y-%m-%d %H:%M')}] {note}"
    if shipment.special_instructions:
        shipment.special_instructions = f"{shipment.special_instructions}\n{line}"
    else:
        shipment.special_instructions = line


def _commit_versioned(db: Session) -> None:
    """
    Commit a shipment change, turning a lost version race into a retryable
    conflict. Queued notifications go out only once the commit has succeeded.
    """
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent shipment modification detected")
        raise ConflictError("Shipment was modified by another request. Please retry.", retryable=True)
    notification_service.deliver_pending(db)


# Booking

def create_shipment(db: Session, payload, principal: Optional[Principal] = None) -> Shipment:
    """
    Book a shipment for a guest or a signed-in customer.

    Args:
        payload: validated ShipmentCreate
        principal: caller resolved from the bearer token, if any

    Returns:
        The pending Shipment
    """
    user_id = None
    if payload.user_type == BookingUserType.AUTHENTICATED:
        if principal is None:
            raise AuthenticationError("You must be logged in to create an authenticated booking")
        if principal.role != Role.USER:
            raise PermissionDeniedError("Only customer accounts can create authenticated bookings")
        user_id = principal.id

    vehicle_type = require_active_type(db, payload.vehicle_type)

    guest = payload.user_type == BookingUserType.GUEST
    shipment = Shipment(
        tracking_number=generate_unique_tracking_number(db),
        status=ShipmentStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        user_type=payload.user_type,
        user_id=user_id,
        guest_name=payload.guest_name if guest else None,
        guest_phone=payload.guest_phone if guest else None,
        guest_email=payload.guest_email if guest else None,
        pickup_address=payload.pickup_address,
        delivery_address=payload.delivery_address,
        pickup_lat=payload.pickup_lat,
        pickup_lng=payload.pickup_lng,
        delivery_lat=payload.delivery_lat,
        delivery_lng=payload.delivery_lng,
        scheduled_pickup_date=payload.scheduled_pickup_date,
        estimated_delivery_date=payload.estimated_delivery_date,
        weight=payload.weight,
        dimensions=payload.dimensions,
        special_instructions=payload.special_instructions,
        vehicle_type=vehicle_type.vehicle_type,
        # Price is taken as quoted by the client
        price=payload.price,
        distance=payload.distance,
    )
    db.add(shipment)
    db.flush()

    notification_service.notify_booking_confirmed(db, shipment)
    db.commit()
    notification_service.deliver_pending(db)
    db.refresh(shipment)

    logger.info(
        "Shipment %s booked (%s, %s)",
        shipment.tracking_number,
        shipment.user_type.value,
        shipment.vehicle_type,
    )
    return shipment


def get_by_tracking_number(db: Session, tracking_number: str) -> Shipment:
    shipment = db.query(Shipment).filter(Shipment.tracking_number == tracking_number.strip().upper()).first()
    if shipment is None:
        raise NotFoundError("Shipment not found")
    return shipment


def get_shipment(db: Session, shipment_id) -> Shipment:
    shipment = db.get(Shipment, shipment_id)
    if shipment is None:
        raise NotFoundError("Shipment not found")
    return shipment


# Listings

def list_user_shipments(db: Session, user_id, status: Optional[ShipmentStatus] = None):
    query = db.query(Shipment).filter(Shipment.user_id == user_id)
    if status is not None:
        query = query.filter(Shipment.status == status)
    return query.order_by(Shipment.created_at.desc())


def get_user_shipment(db: Session, user_id, shipment_id) -> Shipment:
    shipment = db.query(Shipment).filter(Shipment.id == shipment_id, Shipment.user_id == user_id).first()
    if shipment is None:
        raise NotFoundError("Shipment not found")
    return shipment


def list_driver_shipments(db: Session, driver_id, status: Optional[ShipmentStatus] = None):
    query = db.query(Shipment).filter(Shipment.driver_id == driver_id)
    if status is not None:
        query = query.filter(Shipment.status == status)
    return query.order_by(Shipment.assigned_at.desc(), Shipment.created_at.desc())


def list_shipments(
    db: Session,
    status: Optional[ShipmentStatus] = None,
    user_id=None,
    vehicle_id=None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
):
    query = db.query(Shipment)
    if status is not None:
        query = query.filter(Shipment.status == status)
    if user_id is not None:
        query = query.filter(Shipment.user_id == user_id)
    if vehicle_id is not None:
        query = query.filter(Shipment.vehicle_id == vehicle_id)
    if from_date is not None:
        query = query.filter(Shipment.created_at >= from_date)
    if to_date is not None:
        query = query.filter(Shipment.created_at <= to_date)
    return query.order_by(Shipment.created_at.desc())


def update_shipment(db: Session, shipment_id, payload) -> Shipment:
    shipment = get_shipment(db, shipment_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequestError("No fields to update")

    newly_paid = (
        changes.get("payment_status") == PaymentStatus.PAID and shipment.payment_status != PaymentStatus.PAID
    )
    for field, value in changes.items():
        setattr(shipment, field, value)

    if newly_paid and shipment.user_id is not None:
        title, body = notification_service.render_template(
            NotificationType.PAYMENT_RECEIVED, amount=f"{shipment.price or 0:.2f}"
        )
        notification_service.notify(
            db,
            NotificationType.PAYMENT_RECEIVED,
            title,
            body,
            user_id=shipment.user_id,
            shipment_id=shipment.id,
            data={"shipmentId": str(shipment.id)},
        )

    _commit_versioned(db)
    db.refresh(shipment)
    logger.info("Shipment %s updated by admin: %s", shipment.tracking_number, ", ".join(changes))
    return shipment


# Assignment

def check_driver_assignable(driver: Driver, shipment: Shipment) -> None:
    """
    Raise a BadRequestError naming the first rule the driver fails.

    Rules: active account, verified documents, online, and a registered
    vehicle type equal to the one the shipment was booked for.
    """
    if not driver.active:
        raise BadRequestError("Driver account is inactive")
    if not driver.is_verified:
        raise BadRequestError("Driver documents are not verified")
    if driver.availability_status != AvailabilityStatus.ONLINE:
        raise BadRequestError("Driver is offline")
    if driver.vehicle_type != shipment.vehicle_type:
        raise BadRequestError(
            f"Driver vehicle type '{driver.vehicle_type}' does not match "
            f"shipment vehicle type '{shipment.vehicle_type}'"
        )


def _has_other_active_shipments(db: Session, vehicle_id, shipment_id) -> bool:
    return (
        db.query(Shipment.id)
        .filter(
            Shipment.vehicle_id == vehicle_id,
            Shipment.id != shipment_id,
            Shipment.status.notin_(TERMINAL_STATUSES),
        )
        .first()
        is not None
    )


def _release_vehicle_for(db: Session, shipment: Shipment) -> None:
    if shipment.vehicle is not None and not _has_other_active_shipments(db, shipment.vehicle_id, shipment.id):
        vehicle_service.release_vehicle(shipment.vehicle)


def assign_driver(db: Session, shipment_id, payload, admin_id) -> Shipment:
    """
    Bind a driver and the driver's fleet vehicle to a pending shipment.

    Runs as one transaction: the shipment row is locked and carries a
    version counter, so two admins racing on the same shipment end with
    one success and one retryable 409. Status stays pending until pickup.

    Args:
        payload: ShipmentAssign body (driver_id, estimated_delivery_date, notes)
        admin_id: id of the admin performing the assignment

    Returns:
        The updated Shipment
    """
    shipment = db.query(Shipment).filter(Shipment.id == shipment_id).with_for_update().first()
    if shipment is None:
        raise NotFoundError("Shipment not found")
    if shipment.status != ShipmentStatus.PENDING:
        raise BadRequestError(f"Only pending shipments can be assigned (current status: {shipment.status.value})")

    driver = db.query(Driver).filter(Driver.id == payload.driver_id).with_for_update().first()
    if driver is None:
        raise NotFoundError("Driver not found")
    check_driver_assignable(driver, shipment)

    vehicle = vehicle_service.resolve_driver_vehicle(db, driver)
    if vehicle.status in (VehicleStatus.MAINTENANCE, VehicleStatus.OUT_OF_SERVICE):
        raise BadRequestError(f"Driver's vehicle {vehicle.vehicle_number} is {vehicle.status.value}")

    if shipment.vehicle_id is not None and shipment.vehicle_id != vehicle.id:
        _release_vehicle_for(db, shipment)

    shipment.vehicle_id = vehicle.id
    shipment.driver_id = driver.id
    shipment.assigned_at = utcnow()
    if payload.estimated_delivery_date is not None:
        shipment.estimated_delivery_date = payload.estimated_delivery_date
    note = f"Assigned to driver {driver.full_name} ({vehicle.vehicle_number})"
    if payload.notes:
        note = f"{note}: {payload.notes}"
    append_note(shipment, note)
    vehicle.status = VehicleStatus.IN_USE

    notification_service.notify_assignment(db, shipment, driver, vehicle)
    _commit_versioned(db)
    db.refresh(shipment)

    logger.info(
        "Shipment %s assigned to driver %s, vehicle %s by admin %s",
        shipment.tracking_number,
        driver.id,
        vehicle.vehicle_number,
        admin_id,
    )
    return shipment


# Status transitions

def update_status(
    db: Session,
    shipment_id,
    new_status: ShipmentStatus,
    principal: Principal,
    notes: Optional[str] = None,
) -> Shipment:
    """
    Move a shipment to a new status.

    Drivers may only move shipments assigned to them; admins may move any.
    Delivered, failed and cancelled are final.
    """
    shipment = db.query(Shipment).filter(Shipment.id == shipment_id).with_for_update().first()
    if shipment is None:
        raise NotFoundError("Shipment not found")
    if principal.role == Role.DRIVER and shipment.driver_id != principal.id:
        raise PermissionDeniedError("This shipment is not assigned to you")
    if shipment.is_terminal:
        raise BadRequestError(f"Shipment is already {shipment.status.value} and its status can no longer change")
    if new_status == shipment.status:
        raise BadRequestError(f"Shipment is already {new_status.value}")

    previous = shipment.status
    _apply_status(db, shipment, new_status, notes)
    _commit_versioned(db)
    db.refresh(shipment)

    logger.info(
        "Shipment %s status %s -> %s by %s %s",
        shipment.tracking_number,
        previous.value,
        new_status.value,
        principal.role.value,
        principal.id,
    )
    return shipment


def _apply_status(db: Session, shipment: Shipment, new_status: ShipmentStatus, notes: Optional[str]) -> None:
    now = utcnow()
    shipment.status = new_status
    if new_status == ShipmentStatus.IN_TRANSIT and shipment.actual_pickup_date is None:
        shipment.actual_pickup_date = now
    elif new_status == ShipmentStatus.DELIVERED:
        shipment.actual_delivery_date = now
    if notes:
        append_note(shipment, f"{new_status.value}: {notes}")
    if new_status in TERMINAL_STATUSES:
        _release_vehicle_for(db, shipment)
    notification_service.notify_status_change(db, shipment, notes)


def cancel_user_shipment(db: Session, user_id, shipment_id) -> Shipment:
    shipment = (
        db.query(Shipment)
        .filter(Shipment.id == shipment_id, Shipment.user_id == user_id)
        .with_for_update()
        .first()
    )
    if shipment is None:
        raise NotFoundError("Shipment not found")
    if shipment.status != ShipmentStatus.PENDING:
        raise BadRequestError("Only pending shipments can be cancelled")

    _apply_status(db, shipment, ShipmentStatus.CANCELLED, "Cancelled by customer")
    _commit_versioned(db)
    db.refresh(shipment)
    logger.info("Shipment %s cancelled by customer %s", shipment.tracking_number, user_id)
    return shipment
