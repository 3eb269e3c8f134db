from __future__ import annotations
import re
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from apace.models.driver_model import AvailabilityStatus
from apace.schemas.common import CamelModel
from apace.schemas.user import NAME_PATTERN, PHONE_PATTERN

VEHICLE_NUMBER_PATTERN = r"^[A-Z]{2}\d{2}\s[A-Z]{2}\d{4}$"


class DriverRead(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    profile_picture: Optional[str] = None
    active: bool
    availability_status: AvailabilityStatus = Field(alias="availability_status")
    vehicle_type: str
    vehicle_capacity: str
    vehicle_number: str
    is_verified: bool
    documents_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class AvailableDriverRead(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    full_name: str
    phone: str
    vehicle_type: str
    vehicle_capacity: str
    vehicle_number: str
    availability_status: AvailabilityStatus = Field(alias="availability_status")
    is_verified: bool


class DriverSignup(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    vehicle_type: str = Field(..., min_length=1)
    vehicle_capacity: str = Field(..., min_length=1, max_length=50)
    vehicle_number: str

    @field_validator("vehicle_number", mode="before")
    @classmethod
    def _upper_vehicle_number(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("vehicle_number")
    @classmethod
    def _check_vehicle_number(cls, value: str) -> str:
        if not re.match(VEHICLE_NUMBER_PATTERN, value):
            raise ValueError("Vehicle number must look like AB09 CD1234")
        return value


class DriverProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    email: Optional[EmailStr] = None
    vehicle_capacity: Optional[str] = Field(None, min_length=1, max_length=50)
    profile_picture: Optional[str] = None


class AvailabilityUpdate(CamelModel):
    availability_status: AvailabilityStatus = Field(alias="availability_status")


class AvailabilityRead(CamelModel):
    id: UUID
    availability_status: AvailabilityStatus = Field(alias="availability_status")
    updated_at: Optional[datetime] = None
