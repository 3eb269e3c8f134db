from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from apace.database import get_db
from apace.core.deps import Principal, require_admin, require_driver
from apace.schemas.common import Envelope
from apace.schemas.driver import AvailabilityRead, AvailabilityUpdate, AvailableDriverRead, DriverProfileUpdate, DriverRead
from apace.services import driver_service

router = APIRouter(
    prefix="/api/drivers",
    tags=["Drivers"]
)


# ----------------------------------------
# Assignment candidates
# ----------------------------------------

@router.get("/available", response_model=Envelope[List[AvailableDriverRead]])
def available_drivers(
    vehicle_type: Optional[str] = Query(None, alias="vehicleType"),
    online_only: bool = Query(False, alias="onlineOnly"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    """
    Active drivers with verified documents for a vehicle type.
    onlineOnly=true additionally requires the driver to be online.
    """
    drivers = driver_service.find_available_drivers(db, vehicle_type, online_only=online_only)
    return {"data": drivers}


# ----------------------------------------
# Own profile
# ----------------------------------------

@router.get("/me", response_model=Envelope[DriverRead])
def my_profile(principal: Principal = Depends(require_driver)):
    return {"data": principal.account}


@router.patch("/me", response_model=Envelope[DriverRead])
def update_my_profile(
    update_data: DriverProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver)
):
    driver = driver_service.update_profile(db, principal.account, update_data)
    return {"message": "Profile updated", "data": driver}


# ----------------------------------------
# Availability
# ----------------------------------------

@router.get("/me/status", response_model=Envelope[AvailabilityRead])
def my_status(principal: Principal = Depends(require_driver)):
    return {"data": principal.account}


@router.patch("/me/status", response_model=Envelope[AvailabilityRead])
def update_my_status(
    update_data: AvailabilityUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver)
):
    driver = driver_service.set_availability(db, principal.account, update_data.availability_status)
    return {"message": f"You are now {driver.availability_status.value}", "data": driver}
