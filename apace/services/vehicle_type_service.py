import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apace.core.errors import BadRequestError, ConflictError, NotFoundError
from apace.models.vehicle_type_model import VehicleType, normalize_vehicle_type

logger = logging.getLogger(__name__)


def format_public(vehicle_type: VehicleType) -> dict:
    """Catalog entry in the shape the booking apps render directly."""
    base = float(vehicle_type.base_price)
    per_km = float(vehicle_type.price_per_km)
    starting = float(vehicle_type.starting_price)
    return {
        "id": str(vehicle_type.id),
        "type": vehicle_type.vehicle_type,
        "name": vehicle_type.label,
        "capacity": vehicle_type.capacity,
        "iconKey": vehicle_type.icon_key,
        "pricing": {"base": base, "perKm": per_km, "starting": starting},
        "displayPrice": f"Starting from ${starting:.2f}",
        "priceRange": {"min": starting, "baseRate": base, "kmRate": per_km},
    }


def get_active_types(db: Session) -> List[VehicleType]:
    return (
        db.query(VehicleType)
        .filter(VehicleType.is_active.is_(True))
        .order_by(VehicleType.vehicle_type.asc())
        .all()
    )


def get_active_type(db: Session, vehicle_type: str) -> Optional[VehicleType]:
    return (
        db.query(VehicleType)
        .filter(
            VehicleType.vehicle_type == normalize_vehicle_type(vehicle_type),
            VehicleType.is_active.is_(True),
        )
        .first()
    )


def require_active_type(db: Session, vehicle_type: str) -> VehicleType:
    """
    Resolve a vehicle type name against the active catalog.

    Raises:
        BadRequestError: listing the valid types when the name is unknown or inactive
    """
    match = get_active_type(db, vehicle_type)
    if match is None:
        valid = ", ".join(vt.vehicle_type for vt in get_active_types(db))
        raise BadRequestError(f"Invalid vehicle type '{vehicle_type}'. Valid types: {valid}")
    return match


def list_types(db: Session, is_active: Optional[bool] = None, search: Optional[str] = None):
    query = db.query(VehicleType)
    if is_active is not None:
        query = query.filter(VehicleType.is_active.is_(is_active))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(VehicleType.vehicle_type.ilike(pattern), VehicleType.label.ilike(pattern)))
    return query.order_by(VehicleType.vehicle_type.asc())


def get_type(db: Session, vehicle_type_id) -> VehicleType:
    vehicle_type = db.get(VehicleType, vehicle_type_id)
    if vehicle_type is None:
        raise NotFoundError("Vehicle type not found")
    return vehicle_type


def create_type(db: Session, payload) -> VehicleType:
    existing = db.query(VehicleType).filter(VehicleType.vehicle_type == payload.vehicle_type).first()
    if existing:
        raise ConflictError(f"Vehicle type '{payload.vehicle_type}' already exists")

    vehicle_type = VehicleType(**payload.model_dump())
    db.add(vehicle_type)
    db.commit()
    db.refresh(vehicle_type)
    logger.info("Vehicle type created: %s", vehicle_type.vehicle_type)
    return vehicle_type


def update_type(db: Session, vehicle_type_id, payload) -> VehicleType:
    vehicle_type = get_type(db, vehicle_type_id)
    changes = payload.model_dump(exclude_unset=True)

    new_name = changes.get("vehicle_type")
    if new_name and new_name != vehicle_type.vehicle_type:
        clash = (
            db.query(VehicleType)
            .filter(VehicleType.vehicle_type == new_name, VehicleType.id != vehicle_type.id)
            .first()
        )
        if clash:
            raise ConflictError(f"Vehicle type '{new_name}' already exists")

    for field, value in changes.items():
        if value is None:
            continue
        setattr(vehicle_type, field, value)

    db.commit()
    db.refresh(vehicle_type)
    logger.info("Vehicle type updated: %s (%s)", vehicle_type.vehicle_type, ", ".join(changes))
    return vehicle_type


def deactivate_type(db: Session, vehicle_type_id) -> VehicleType:
    """Soft delete. Past shipments keep their copy of the type name."""
    vehicle_type = get_type(db, vehicle_type_id)
    vehicle_type.is_active = False
    db.commit()
    db.refresh(vehicle_type)
    logger.info("Vehicle type deactivated: %s", vehicle_type.vehicle_type)
    return vehicle_type
