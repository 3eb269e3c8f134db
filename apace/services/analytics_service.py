from datetime import datetime, time, timedelta
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from apace.database import utcnow
from apace.models.driver_document_model import DocumentStatus, DriverDocument
from apace.models.driver_model import AvailabilityStatus, Driver
from apace.models.shipment_model import PaymentStatus, Shipment, ShipmentStatus
from apace.models.user_model import User
from apace.models.vehicle_model import Vehicle, VehicleStatus


def get_dashboard_stats(db: Session) -> dict:
    """
    Headline numbers for the admin dashboard

    Args:
        db: Database session

    Returns:
        Dictionary of user, driver, shipment, revenue and document totals
    """
    shipments_by_status = {status.value: 0 for status in ShipmentStatus}
    for status, count in db.query(Shipment.status, func.count(Shipment.id)).group_by(Shipment.status).all():
        shipments_by_status[status.value] = count

    revenue = (
        db.query(func.coalesce(func.sum(Shipment.price), 0))
        .filter(Shipment.payment_status == PaymentStatus.PAID)
        .scalar()
    )

    verified_drivers = (
        db.query(Driver)
        .join(DriverDocument, DriverDocument.driver_id == Driver.id)
        .filter(DriverDocument.status == DocumentStatus.VERIFIED)
        .count()
    )

    return {
        "users": {
            "total": db.query(User).count(),
            "active": db.query(User).filter(User.active.is_(True)).count(),
        },
        "drivers": {
            "total": db.query(Driver).count(),
            "verified": verified_drivers,
            "online": db.query(Driver)
            .filter(Driver.active.is_(True), Driver.availability_status == AvailabilityStatus.ONLINE)
            .count(),
        },
        "shipments": {
            "total": sum(shipments_by_status.values()),
            "byStatus": shipments_by_status,
        },
        "vehicles": {
            "total": db.query(Vehicle).count(),
            "inUse": db.query(Vehicle).filter(Vehicle.status == VehicleStatus.IN_USE).count(),
        },
        "revenue": float(revenue or 0),
        "pendingDocuments": db.query(DriverDocument).filter(DriverDocument.status == DocumentStatus.PENDING).count(),
    }


def get_shipment_trends(db: Session, days: int = 7) -> List[dict]:
    """Daily booking counts for the last `days` days, oldest first, zero-filled."""
    today = utcnow().date()
    start = today - timedelta(days=days - 1)

    rows = (
        db.query(func.date(Shipment.created_at), func.count(Shipment.id))
        .filter(Shipment.created_at >= datetime.combine(start, time.min))
        .group_by(func.date(Shipment.created_at))
        .all()
    )
    # SQLite hands back ISO strings, MySQL hands back dates
    counts = {(day if isinstance(day, str) else day.isoformat()): count for day, count in rows}

    trend = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).isoformat()
        trend.append({"date": day, "count": counts.get(day, 0)})
    return trend
