from __future__ import annotations
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field, field_validator

from apace.models.vehicle_type_model import ICON_KEYS, normalize_vehicle_type
from apace.schemas.common import CamelModel


class VehicleTypeCreate(CamelModel):
    vehicle_type: str = Field(..., min_length=2, max_length=50)
    label: str = Field(..., min_length=2, max_length=100)
    capacity: str = Field(..., min_length=1, max_length=100)
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    price_per_km: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    starting_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    icon_key: str = "default"
    is_active: bool = True

    @field_validator("vehicle_type")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_vehicle_type(value)

    @field_validator("icon_key")
    @classmethod
    def _check_icon_key(cls, value):
        if value is not None and value not in ICON_KEYS:
            raise ValueError("Icon key must be one of: " + ", ".join(ICON_KEYS))
        return value


class VehicleTypeUpdate(CamelModel):
    vehicle_type: Optional[str] = Field(None, min_length=2, max_length=50)
    label: Optional[str] = Field(None, min_length=2, max_length=100)
    capacity: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    price_per_km: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    starting_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    icon_key: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("vehicle_type")
    @classmethod
    def _normalize(cls, value):
        return normalize_vehicle_type(value) if value is not None else value

    @field_validator("icon_key")
    @classmethod
    def _check_icon_key(cls, value):
        if value is not None and value not in ICON_KEYS:
            raise ValueError("Icon key must be one of: " + ", ".join(ICON_KEYS))
        return value


class VehicleTypeRead(CamelModel):
    id: UUID
    vehicle_type: str
    label: str
    capacity: str
    base_price: float
    price_per_km: float
    starting_price: float
    icon_key: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
