from sqlalchemy import Column, String, Numeric, DateTime, Boolean, Uuid
import re
import uuid

from apace.database import Base, utcnow

ICON_KEYS = ("truck", "bike", "car", "van", "bus", "tractor", "container", "default")


def normalize_vehicle_type(value: str) -> str:
    """'Mini Truck' -> 'mini_truck'"""
    return re.sub(r"\s+", "_", value.strip().lower())


class VehicleType(Base):
    """Priced service tier. Shipments copy the vehicle_type string, not the id."""

    __tablename__ = "vehicle_types"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_type = Column(String(50), unique=True, index=True, nullable=False)
    label = Column(String(100), nullable=False)
    capacity = Column(String(100), nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False)
    price_per_km = Column(Numeric(10, 2), nullable=False)
    starting_price = Column(Numeric(10, 2), nullable=False)
    icon_key = Column(String(20), default="default", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
