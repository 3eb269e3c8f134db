from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from apace.database import get_db
from apace.core.deps import Principal, require_admin
from apace.core.pagination import paginate
from apace.models.vehicle_model import VehicleStatus
from apace.schemas.common import Envelope
from apace.schemas.vehicle import VehicleCreate, VehicleRead, VehicleStatusUpdate
from apace.services import vehicle_service

router = APIRouter(
    prefix="/api/admin/fleet-vehicles",
    tags=["Admin - Fleet Vehicles"]
)


@router.get("", response_model=Envelope[List[VehicleRead]])
def list_vehicles(
    vehicle_status: Optional[VehicleStatus] = Query(None, alias="status"),
    vehicle_type: Optional[str] = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    query = vehicle_service.list_vehicles(db, status=vehicle_status, vehicle_type=vehicle_type)
    vehicles, pagination = paginate(query, page, limit)
    return {"data": vehicles, "pagination": pagination}


@router.get("/available", response_model=Envelope[List[VehicleRead]])
def available_vehicles(
    vehicle_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    return {"data": vehicle_service.list_available_vehicles(db, vehicle_type)}


@router.post("", response_model=Envelope[VehicleRead], status_code=status.HTTP_201_CREATED)
def create_vehicle(
    vehicle: VehicleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    return {"message": "Vehicle registered", "data": vehicle_service.create_vehicle(db, vehicle)}


@router.patch("/{vehicle_id}/status", response_model=Envelope[VehicleRead])
def update_vehicle_status(
    vehicle_id: UUID,
    update_data: VehicleStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    vehicle = vehicle_service.update_vehicle_status(db, vehicle_id, update_data.status)
    return {"message": "Vehicle status updated", "data": vehicle}
