import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apace.core.errors import BadRequestError, NotFoundError
from apace.models.driver_model import Driver
from apace.models.vehicle_model import Vehicle, VehicleStatus

logger = logging.getLogger(__name__)


def list_vehicles(db: Session, status: Optional[VehicleStatus] = None, vehicle_type: Optional[str] = None):
    query = db.query(Vehicle)
    if status is not None:
        query = query.filter(Vehicle.status == status)
    if vehicle_type:
        query = query.filter(Vehicle.type == vehicle_type)
    return query.order_by(Vehicle.created_at.desc())


def list_available_vehicles(db: Session, vehicle_type: Optional[str] = None):
    return list_vehicles(db, status=VehicleStatus.AVAILABLE, vehicle_type=vehicle_type).all()


def create_vehicle(db: Session, payload) -> Vehicle:
    """
    Register a fleet vehicle.

    Args:
        payload: VehicleCreate body
        db: Database session

    Returns:
        The new Vehicle, status available
    """
    clash = (
        db.query(Vehicle)
        .filter(or_(Vehicle.vehicle_number == payload.vehicle_number, Vehicle.license_plate == payload.license_plate))
        .first()
    )
    if clash:
        raise BadRequestError("A vehicle with this vehicle number or license plate already exists")
    if payload.driver_id is not None and db.get(Driver, payload.driver_id) is None:
        raise NotFoundError("Driver not found")

    vehicle = Vehicle(**payload.model_dump(), status=VehicleStatus.AVAILABLE)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info("Fleet vehicle registered: %s", vehicle.vehicle_number)
    return vehicle


def update_vehicle_status(db: Session, vehicle_id, new_status: VehicleStatus) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is None:
        raise NotFoundError("Vehicle not found")
    vehicle.status = new_status
    db.commit()
    db.refresh(vehicle)
    logger.info("Fleet vehicle %s is now %s", vehicle.vehicle_number, new_status.value)
    return vehicle


def resolve_driver_vehicle(db: Session, driver: Driver) -> Vehicle:
    """
    Fleet vehicle a driver operates for their registered vehicle type.

    Among the driver's vehicles of that type, the one carrying the driver's
    registered vehicle number wins. When no fleet row exists yet one is
    created from the signup details. The row is added to the caller's
    transaction, not committed.

    Returns:
        The driver's Vehicle

    Raises:
        BadRequestError: the registered vehicle number belongs to another
            driver's fleet vehicle, or to one of a different type
    """
    owned = (
        db.query(Vehicle)
        .filter(Vehicle.driver_id == driver.id, Vehicle.type == driver.vehicle_type)
        .order_by(Vehicle.created_at.asc())
        .all()
    )
    for vehicle in owned:
        if vehicle.vehicle_number == driver.vehicle_number:
            return vehicle
    if owned:
        return owned[0]

    vehicle = db.query(Vehicle).filter(Vehicle.vehicle_number == driver.vehicle_number).first()
    if vehicle is not None:
        if vehicle.driver_id is not None and vehicle.driver_id != driver.id:
            raise BadRequestError(f"Vehicle {vehicle.vehicle_number} is assigned to another driver")
        if vehicle.type != driver.vehicle_type:
            raise BadRequestError(
                f"Vehicle {vehicle.vehicle_number} is registered as '{vehicle.type}', "
                f"not '{driver.vehicle_type}'"
            )
        vehicle.driver_id = driver.id
        return vehicle

    vehicle = Vehicle(
        vehicle_number=driver.vehicle_number,
        type=driver.vehicle_type,
        license_plate=driver.vehicle_number,
        status=VehicleStatus.AVAILABLE,
        driver_id=driver.id,
    )
    db.add(vehicle)
    db.flush()
    logger.info("Registered fleet vehicle %s for driver %s", vehicle.vehicle_number, driver.id)
    return vehicle


def release_vehicle(vehicle: Optional[Vehicle]) -> None:
    if vehicle is not None and vehicle.status == VehicleStatus.IN_USE:
        vehicle.status = VehicleStatus.AVAILABLE
