from sqlalchemy import Column, String, Float, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import enum
import uuid

from apace.database import Base, utcnow


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"


class Vehicle(Base):
    """Physical fleet asset, optionally owned by a driver."""

    __tablename__ = "vehicles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    vehicle_number = Column(String(50), unique=True, index=True, nullable=False)
    type = Column(String(50), nullable=False)
    model = Column(String(100), nullable=True)
    license_plate = Column(String(50), unique=True, nullable=False)
    capacity = Column(Float, nullable=True)  # cubic meters
    max_weight = Column(Float, nullable=True)  # kg
    current_lat = Column(Float, nullable=True)
    current_lng = Column(Float, nullable=True)
    status = Column(Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False)
    driver_id = Column(Uuid, ForeignKey("drivers.id", ondelete="SET NULL"), index=True, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    driver = relationship("Driver", back_populates="vehicles")
    shipments = relationship("Shipment", back_populates="vehicle")
