import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apace.core.errors import BadRequestError, NotFoundError
from apace.models.driver_document_model import DocumentStatus, DriverDocument
from apace.models.driver_model import AvailabilityStatus, Driver
from apace.models.vehicle_type_model import normalize_vehicle_type

logger = logging.getLogger(__name__)


def find_available_drivers(db: Session, vehicle_type: str, online_only: bool = False) -> List[Driver]:
    """
    Candidate drivers for a shipment of the given vehicle type.

    Args:
        vehicle_type: catalog name, normalised before matching
        online_only: also require availability_status == online
        db: Database session

    Returns:
        Active drivers with verified documents and a matching vehicle type
    """
    if not vehicle_type or not vehicle_type.strip():
        raise BadRequestError("vehicleType query parameter is required")

    query = (
        db.query(Driver)
        .join(DriverDocument, DriverDocument.driver_id == Driver.id)
        .filter(
            Driver.active.is_(True),
            DriverDocument.status == DocumentStatus.VERIFIED,
            Driver.vehicle_type == normalize_vehicle_type(vehicle_type),
        )
    )
    if online_only:
        query = query.filter(Driver.availability_status == AvailabilityStatus.ONLINE)
    return query.order_by(Driver.first_name.asc(), Driver.last_name.asc()).all()


def get_driver(db: Session, driver_id) -> Driver:
    driver = db.get(Driver, driver_id)
    if driver is None:
        raise NotFoundError("Driver not found")
    return driver


def set_availability(db: Session, driver: Driver, availability: AvailabilityStatus) -> Driver:
    driver.availability_status = availability
    db.commit()
    db.refresh(driver)
    logger.info("Driver %s is now %s", driver.id, availability.value)
    return driver


def update_profile(db: Session, driver: Driver, payload) -> Driver:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequestError("No fields to update")
    for field, value in changes.items():
        setattr(driver, field, value)
    db.commit()
    db.refresh(driver)
    logger.info("Driver %s updated profile: %s", driver.id, ", ".join(changes))
    return driver


def list_drivers(
    db: Session,
    search: Optional[str] = None,
    vehicle_type: Optional[str] = None,
    verified: Optional[bool] = None,
    active: Optional[bool] = None,
):
    query = db.query(Driver).outerjoin(DriverDocument, DriverDocument.driver_id == Driver.id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Driver.first_name.ilike(pattern),
                Driver.last_name.ilike(pattern),
                Driver.email.ilike(pattern),
                Driver.phone.ilike(pattern),
                Driver.vehicle_number.ilike(pattern),
            )
        )
    if vehicle_type:
        query = query.filter(Driver.vehicle_type == normalize_vehicle_type(vehicle_type))
    if verified is True:
        query = query.filter(DriverDocument.status == DocumentStatus.VERIFIED)
    elif verified is False:
        query = query.filter(or_(DriverDocument.id.is_(None), DriverDocument.status != DocumentStatus.VERIFIED))
    if active is not None:
        query = query.filter(Driver.active.is_(active))
    return query.order_by(Driver.created_at.desc())


def set_driver_active(db: Session, driver_id, active: bool) -> Driver:
    driver = get_driver(db, driver_id)
    driver.active = active
    if not active:
        driver.availability_status = AvailabilityStatus.OFFLINE
    db.commit()
    db.refresh(driver)
    logger.info("Driver %s %s", driver.id, "activated" if active else "deactivated")
    return driver
