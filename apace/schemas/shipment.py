from __future__ import annotations
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import EmailStr, Field, model_validator

from apace.models.shipment_model import BookingUserType, PaymentStatus, ShipmentStatus
from apace.schemas.common import CamelModel

GUEST_FIELDS = ("guest_name", "guest_phone", "guest_email")


class ShipmentCreate(CamelModel):
    user_type: BookingUserType = BookingUserType.GUEST
    pickup_address: str = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1)
    pickup_lat: Optional[float] = Field(None, ge=-90, le=90)
    pickup_lng: Optional[float] = Field(None, ge=-180, le=180)
    delivery_lat: Optional[float] = Field(None, ge=-90, le=90)
    delivery_lng: Optional[float] = Field(None, ge=-180, le=180)
    scheduled_pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    weight: Decimal = Field(..., gt=0, description="Package weight in kg")
    dimensions: Optional[str] = Field(None, max_length=100)
    special_instructions: Optional[str] = None
    vehicle_type: str = Field(..., min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    distance: Optional[Decimal] = Field(None, ge=1, description="Route length in km")
    guest_name: Optional[str] = Field(None, max_length=100)
    guest_phone: Optional[str] = Field(None, max_length=20)
    guest_email: Optional[EmailStr] = None
    user_id: Optional[UUID] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_weight(cls, data):
        # Older clients send estimatedWeight
        if isinstance(data, dict) and data.get("weight") is None and data.get("estimatedWeight") is not None:
            data = {**data, "weight": data["estimatedWeight"]}
        return data

    @model_validator(mode="after")
    def _customer_identity(self):
        provided = [name for name in GUEST_FIELDS if getattr(self, name)]
        if self.user_type == BookingUserType.GUEST:
            if len(provided) != len(GUEST_FIELDS):
                raise ValueError("guestName, guestPhone and guestEmail are required for guest bookings")
            if self.user_id is not None:
                raise ValueError("userId must not be provided for guest bookings")
        elif provided:
            raise ValueError("Guest fields must not be provided for authenticated bookings")
        return self


class GuestShipmentCreate(ShipmentCreate):
    @model_validator(mode="before")
    @classmethod
    def _force_guest(cls, data):
        if isinstance(data, dict):
            data = {**data, "userType": BookingUserType.GUEST.value}
        return data


class ShipmentRead(CamelModel):
    id: UUID
    tracking_number: str
    status: ShipmentStatus
    pickup_address: str
    delivery_address: str
    pickup_lat: Optional[float] = None
    pickup_lng: Optional[float] = None
    delivery_lat: Optional[float] = None
    delivery_lng: Optional[float] = None
    scheduled_pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    actual_pickup_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None
    weight: float
    dimensions: Optional[str] = None
    special_instructions: Optional[str] = None
    vehicle_type: str
    price: Optional[float] = None
    distance: Optional[float] = None
    payment_status: PaymentStatus
    user_type: BookingUserType
    user_id: Optional[UUID] = None
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    vehicle_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    assigned_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class TrackingVehicle(CamelModel):
    vehicle_number: str
    type: str


class ShipmentTracking(CamelModel):
    tracking_number: str
    status: ShipmentStatus
    pickup_address: str
    delivery_address: str
    scheduled_pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    actual_pickup_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None
    weight: float
    distance: Optional[float] = None
    price: Optional[float] = None
    vehicle_type: str
    payment_status: PaymentStatus
    vehicle: Optional[TrackingVehicle] = None
    created_at: datetime


class ShipmentAssign(CamelModel):
    driver_id: UUID
    estimated_delivery_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)


class ShipmentStatusUpdate(CamelModel):
    status: ShipmentStatus
    notes: Optional[str] = Field(None, max_length=500)


class ShipmentAdminUpdate(CamelModel):
    price: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    scheduled_pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    special_instructions: Optional[str] = None
    dimensions: Optional[str] = Field(None, max_length=100)
