from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from apace.database import get_db
from apace.core.deps import Principal, require_admin
from apace.core.pagination import paginate
from apace.schemas.common import Envelope
from apace.schemas.driver import DriverRead
from apace.schemas.user import ActiveUpdate, UserRead
from apace.services import driver_service, user_service

router = APIRouter(prefix="/api/admin", tags=["Admin - Accounts"])


# ----------------------------------------
# Customers
# ----------------------------------------

@router.get("/users", response_model=Envelope[List[UserRead]])
def list_users(
    search: Optional[str] = None,
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    users, pagination = paginate(user_service.list_users(db, search=search, active=active), page, limit)
    return {"data": users, "pagination": pagination}


@router.patch("/users/{user_id}/active", response_model=Envelope[UserRead])
def set_user_active(
    user_id: UUID,
    update_data: ActiveUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    user = user_service.set_user_active(db, user_id, update_data.active)
    return {"message": "User activated" if user.active else "User deactivated", "data": user}


# ----------------------------------------
# Drivers
# ----------------------------------------

@router.get("/drivers", response_model=Envelope[List[DriverRead]])
def list_drivers(
    search: Optional[str] = None,
    vehicle_type: Optional[str] = Query(None, alias="vehicleType"),
    verified: Optional[bool] = None,
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    query = driver_service.list_drivers(db, search=search, vehicle_type=vehicle_type, verified=verified, active=active)
    drivers, pagination = paginate(query, page, limit)
    return {"data": drivers, "pagination": pagination}


@router.patch("/drivers/{driver_id}/active", response_model=Envelope[DriverRead])
def set_driver_active(
    driver_id: UUID,
    update_data: ActiveUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    driver = driver_service.set_driver_active(db, driver_id, update_data.active)
    return {"message": "Driver activated" if driver.active else "Driver deactivated", "data": driver}
