from sqlalchemy import Column, String, DateTime, Enum, Boolean, Uuid
from sqlalchemy.orm import relationship
import enum
import uuid

from apace.database import Base, utcnow
from apace.models.driver_document_model import DocumentStatus


class AvailabilityStatus(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    profile_picture = Column(String(500), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    availability_status = Column(Enum(AvailabilityStatus), default=AvailabilityStatus.OFFLINE, nullable=False)

    # Registered vehicle
    vehicle_type = Column(String(50), index=True, nullable=False)
    vehicle_capacity = Column(String(50), nullable=False)
    vehicle_number = Column(String(20), unique=True, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    document = relationship(
        "DriverDocument",
        back_populates="driver",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    vehicles = relationship("Vehicle", back_populates="driver")
    shipments = relationship("Shipment", back_populates="driver")
    device_tokens = relationship("DeviceToken", back_populates="driver")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_verified(self) -> bool:
        # Derived from the document record, never stored
        return self.document is not None and self.document.status == DocumentStatus.VERIFIED

    @property
    def documents_status(self) -> str:
        return self.document.status.value if self.document is not None else "not_uploaded"
