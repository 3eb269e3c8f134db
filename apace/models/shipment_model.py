from sqlalchemy import Column, Integer, String, Numeric, Float, ForeignKey, DateTime, Enum, Text, Uuid
from sqlalchemy.orm import relationship
import enum
import uuid

from apace.database import Base, utcnow


class ShipmentStatus(str, enum.Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.FAILED, ShipmentStatus.CANCELLED})


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class BookingUserType(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    GUEST = "guest"


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tracking_number = Column(String(32), unique=True, index=True, nullable=False)
    status = Column(Enum(ShipmentStatus), default=ShipmentStatus.PENDING, index=True, nullable=False)

    # Route
    pickup_address = Column(Text, nullable=False)
    delivery_address = Column(Text, nullable=False)
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    delivery_lat = Column(Float, nullable=True)
    delivery_lng = Column(Float, nullable=True)
    distance = Column(Numeric(10, 2), nullable=True)

    # Schedule
    scheduled_pickup_date = Column(DateTime, nullable=True)
    estimated_delivery_date = Column(DateTime, nullable=True)
    actual_pickup_date = Column(DateTime, nullable=True)
    actual_delivery_date = Column(DateTime, nullable=True)
    assigned_at = Column(DateTime, nullable=True)

    # Package
    weight = Column(Numeric(10, 2), nullable=False)
    dimensions = Column(String(100), nullable=True)
    special_instructions = Column(Text, nullable=True)
    vehicle_type = Column(String(50), index=True, nullable=False)

    # Payment
    price = Column(Numeric(10, 2), nullable=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    # Customer: an account or a guest contact, never both
    user_type = Column(Enum(BookingUserType), default=BookingUserType.GUEST, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), index=True, nullable=True)
    guest_name = Column(String(100), nullable=True)
    guest_phone = Column(String(20), nullable=True)
    guest_email = Column(String(255), nullable=True)

    # Assignment
    vehicle_id = Column(Uuid, ForeignKey("vehicles.id"), index=True, nullable=True)
    driver_id = Column(Uuid, ForeignKey("drivers.id"), index=True, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    user = relationship("User", back_populates="shipments")
    vehicle = relationship("Vehicle", back_populates="shipments")
    driver = relationship("Driver", back_populates="shipments")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
