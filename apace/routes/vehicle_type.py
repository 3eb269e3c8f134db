from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from apace.database import get_db
from apace.core.deps import Principal, require_admin
from apace.core.errors import NotFoundError
from apace.core.pagination import paginate
from apace.schemas.common import Envelope
from apace.schemas.vehicle_type import VehicleTypeCreate, VehicleTypeRead, VehicleTypeUpdate
from apace.services import vehicle_type_service

public_router = APIRouter(prefix="/api/vehicles", tags=["Vehicle Types"])
router = APIRouter(prefix="/api/admin/vehicle-types", tags=["Admin - Vehicle Types"])


# ----------------------------------------
# Public catalog
# ----------------------------------------

@public_router.get("")
def list_active_vehicle_types(db: Session = Depends(get_db)):
    """Active vehicle types, formatted for the booking screens."""
    vehicle_types = vehicle_type_service.get_active_types(db)
    return {
        "status": "success",
        "data": [vehicle_type_service.format_public(vt) for vt in vehicle_types],
        "meta": {
            "total": len(vehicle_types),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": "1.0",
        },
    }


@public_router.get("/{vehicle_type}/pricing")
def vehicle_type_pricing(vehicle_type: str, db: Session = Depends(get_db)):
    match = vehicle_type_service.get_active_type(db, vehicle_type)
    if match is None:
        raise NotFoundError(f"Vehicle type '{vehicle_type}' not found")
    return {"status": "success", "data": vehicle_type_service.format_public(match)}


# ----------------------------------------
# Admin management
# ----------------------------------------

@router.get("", response_model=Envelope[List[VehicleTypeRead]])
def list_vehicle_types(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    query = vehicle_type_service.list_types(db, is_active=is_active, search=search)
    vehicle_types, pagination = paginate(query, page, limit)
    return {"data": vehicle_types, "pagination": pagination}


@router.get("/{vehicle_type_id}", response_model=Envelope[VehicleTypeRead])
def get_vehicle_type(
    vehicle_type_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return {"data": vehicle_type_service.get_type(db, vehicle_type_id)}


@router.post("", response_model=Envelope[VehicleTypeRead], status_code=status.HTTP_201_CREATED)
def create_vehicle_type(
    vehicle_type: VehicleTypeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    created = vehicle_type_service.create_type(db, vehicle_type)
    return {"message": "Vehicle type created", "data": created}


@router.patch("/{vehicle_type_id}", response_model=Envelope[VehicleTypeRead])
def update_vehicle_type(
    vehicle_type_id: UUID,
    update_data: VehicleTypeUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    updated = vehicle_type_service.update_type(db, vehicle_type_id, update_data)
    return {"message": "Vehicle type updated", "data": updated}


@router.delete("/{vehicle_type_id}", response_model=Envelope[VehicleTypeRead])
def deactivate_vehicle_type(
    vehicle_type_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Soft delete: the type disappears from the catalog and from booking."""
    deactivated = vehicle_type_service.deactivate_type(db, vehicle_type_id)
    return {"message": "Vehicle type deactivated", "data": deactivated}
