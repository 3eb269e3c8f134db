from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from apace.database import get_db
from apace.core.deps import Principal, get_optional_principal, require_admin, require_driver, require_driver_or_admin, require_user
from apace.core.pagination import paginate
from apace.models.shipment_model import ShipmentStatus
from apace.schemas.common import Envelope
from apace.schemas.shipment import (
    GuestShipmentCreate,
    ShipmentAdminUpdate,
    ShipmentAssign,
    ShipmentCreate,
    ShipmentRead,
    ShipmentStatusUpdate,
    ShipmentTracking,
)
from apace.services import shipments_service

router = APIRouter(prefix="/api/shipments", tags=["Shipments"])


# ----------------------------------------
# Booking and tracking (public)
# ----------------------------------------

@router.post("", response_model=Envelope[ShipmentRead], status_code=status.HTTP_201_CREATED)
def create_shipment(
    shipment_data: ShipmentCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    """
    Book a shipment
    - userType "guest" (default): guestName, guestPhone and guestEmail required
    - userType "authenticated": customer bearer token required
    """
    shipment = shipments_service.create_shipment(db, shipment_data, principal)
    return {"message": "Shipment created successfully", "data": shipment}


@router.post("/guest", response_model=Envelope[ShipmentRead], status_code=status.HTTP_201_CREATED)
def create_guest_shipment(
    shipment_data: GuestShipmentCreate,
    db: Session = Depends(get_db),
):
    """Legacy guest-only booking endpoint"""
    shipment = shipments_service.create_shipment(db, shipment_data)
    return {"message": "Shipment created successfully", "data": shipment}


@router.get("/track/{tracking_number}", response_model=Envelope[ShipmentTracking])
def track_shipment(tracking_number: str, db: Session = Depends(get_db)):
    """Public tracking lookup by tracking number"""
    return {"data": shipments_service.get_by_tracking_number(db, tracking_number)}


@router.get("/guest/{tracking_number}", response_model=Envelope[ShipmentTracking])
def track_guest_shipment(tracking_number: str, db: Session = Depends(get_db)):
    """Legacy alias of /track/{tracking_number}"""
    return {"data": shipments_service.get_by_tracking_number(db, tracking_number)}


# ----------------------------------------
# Customer
# ----------------------------------------

@router.get("/my-shipments", response_model=Envelope[List[ShipmentRead]])
def my_shipments(
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    query = shipments_service.list_user_shipments(db, principal.id, status_filter)
    shipments, pagination = paginate(query, page, limit)
    return {"data": shipments, "pagination": pagination}


@router.get("/my-shipments/{shipment_id}", response_model=Envelope[ShipmentRead])
def my_shipment(
    shipment_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    return {"data": shipments_service.get_user_shipment(db, principal.id, shipment_id)}


@router.patch("/my-shipments/{shipment_id}/cancel", response_model=Envelope[ShipmentRead])
def cancel_my_shipment(
    shipment_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    """Customers can cancel their own shipments while still pending"""
    shipment = shipments_service.cancel_user_shipment(db, principal.id, shipment_id)
    return {"message": "Shipment cancelled", "data": shipment}


# ----------------------------------------
# Driver
# ----------------------------------------

@router.get("/driver/assigned", response_model=Envelope[List[ShipmentRead]])
def assigned_shipments(
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    query = shipments_service.list_driver_shipments(db, principal.id, status_filter)
    shipments, pagination = paginate(query, page, limit)
    return {"data": shipments, "pagination": pagination}


@router.patch("/driver/update-status/{shipment_id}", response_model=Envelope[ShipmentRead])
def update_shipment_status(
    shipment_id: UUID,
    update_data: ShipmentStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver_or_admin),
):
    """
    Advance a shipment's status
    - Drivers can only update shipments assigned to them
    - Delivered, failed and cancelled shipments cannot change
    """
    shipment = shipments_service.update_status(
        db, shipment_id, update_data.status, principal, notes=update_data.notes
    )
    return {"message": f"Shipment status updated to {shipment.status.value}", "data": shipment}


# ----------------------------------------
# Admin
# ----------------------------------------

@router.get("/admin", response_model=Envelope[List[ShipmentRead]])
def list_shipments(
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    vehicle_id: Optional[UUID] = Query(None, alias="vehicleId"),
    from_date: Optional[datetime] = Query(None, alias="fromDate"),
    to_date: Optional[datetime] = Query(None, alias="toDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    query = shipments_service.list_shipments(
        db,
        status=status_filter,
        user_id=user_id,
        vehicle_id=vehicle_id,
        from_date=from_date,
        to_date=to_date,
    )
    shipments, pagination = paginate(query, page, limit)
    return {"data": shipments, "pagination": pagination}


@router.patch("/admin/assign/{shipment_id}", response_model=Envelope[ShipmentRead])
def assign_driver(
    shipment_id: UUID,
    assignment: ShipmentAssign,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """
    Assign a verified, online driver whose vehicle type matches the shipment.
    A concurrent change to the same shipment returns 409 with retryable=true.
    """
    shipment = shipments_service.assign_driver(db, shipment_id, assignment, principal.id)
    return {"message": "Driver assigned successfully", "data": shipment}


@router.get("/admin/{shipment_id}", response_model=Envelope[ShipmentRead])
def get_shipment(
    shipment_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return {"data": shipments_service.get_shipment(db, shipment_id)}


@router.patch("/admin/{shipment_id}", response_model=Envelope[ShipmentRead])
def update_shipment(
    shipment_id: UUID,
    update_data: ShipmentAdminUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    shipment = shipments_service.update_shipment(db, shipment_id, update_data)
    return {"message": "Shipment updated", "data": shipment}
