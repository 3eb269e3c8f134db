from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from apace.database import get_db
from apace.core.deps import Principal, require_admin
from apace.schemas.common import Envelope
from apace.services.analytics_service import get_dashboard_stats, get_shipment_trends

router = APIRouter(
    prefix="/api/admin/dashboard",
    tags=["Admin - Dashboard"]
)


@router.get("/stats", response_model=Envelope[dict])
def dashboard_stats(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    return {"data": get_dashboard_stats(db)}


@router.get("/shipment-trends", response_model=Envelope[List[dict]])
def shipment_trends(
    days: int = Query(7, ge=1, le=90),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin)
):
    return {"data": get_shipment_trends(db, days)}
