from __future__ import annotations
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field

from apace.models.vehicle_model import VehicleStatus
from apace.schemas.common import CamelModel


class VehicleBase(CamelModel):
    vehicle_number: str = Field(..., min_length=1, max_length=50)
    type: str = Field(..., min_length=1, max_length=50)
    model: Optional[str] = Field(None, max_length=100)
    license_plate: str = Field(..., min_length=1, max_length=50)
    capacity: Optional[float] = Field(None, gt=0, description="Cargo volume in cubic meters")
    max_weight: Optional[float] = Field(None, gt=0, description="Maximum load in kg")
    current_lat: Optional[float] = Field(None, ge=-90, le=90)
    current_lng: Optional[float] = Field(None, ge=-180, le=180)


class VehicleCreate(VehicleBase):
    driver_id: Optional[UUID] = None


class VehicleStatusUpdate(CamelModel):
    status: VehicleStatus


class VehicleRead(VehicleBase):
    id: UUID
    status: VehicleStatus
    driver_id: Optional[UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
