import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from apace.core.config import settings
from apace.core.logging import setup_logging
from apace.database import Base, SessionLocal, engine
from apace import models  # noqa: F401
from apace.models.admin_model import Admin
from apace.models.vehicle_type_model import VehicleType

logger = logging.getLogger(__name__)

DEFAULT_VEHICLE_TYPES = [
    {
        "vehicle_type": "bike",
        "label": "Bike",
        "capacity": "Up to 20 kg",
        "base_price": Decimal("5.00"),
        "price_per_km": Decimal("0.50"),
        "starting_price": Decimal("5.00"),
        "icon_key": "bike",
    },
    {
        "vehicle_type": "car",
        "label": "Car",
        "capacity": "Up to 200 kg",
        "base_price": Decimal("10.00"),
        "price_per_km": Decimal("1.00"),
        "starting_price": Decimal("10.00"),
        "icon_key": "car",
    },
    {
        "vehicle_type": "van",
        "label": "Van",
        "capacity": "Up to 800 kg",
        "base_price": Decimal("20.00"),
        "price_per_km": Decimal("1.50"),
        "starting_price": Decimal("20.00"),
        "icon_key": "van",
    },
    {
        "vehicle_type": "mini_truck",
        "label": "Mini Truck",
        "capacity": "Up to 1500 kg",
        "base_price": Decimal("35.00"),
        "price_per_km": Decimal("2.00"),
        "starting_price": Decimal("35.00"),
        "icon_key": "truck",
    },
    {
        "vehicle_type": "truck",
        "label": "Truck",
        "capacity": "Up to 5000 kg",
        "base_price": Decimal("60.00"),
        "price_per_km": Decimal("3.00"),
        "starting_price": Decimal("60.00"),
        "icon_key": "truck",
    },
]


def seed_vehicle_types(db: Session) -> int:
    """Insert catalog entries that are missing. Existing rows are left alone."""
    existing = {name for (name,) in db.query(VehicleType.vehicle_type).all()}
    added = 0
    for entry in DEFAULT_VEHICLE_TYPES:
        if entry["vehicle_type"] in existing:
            continue
        db.add(VehicleType(**entry))
        added += 1
    db.commit()
    return added


def seed_admin(db: Session):
    if not settings.ADMIN_PHONE:
        logger.info("ADMIN_PHONE not set, skipping admin seed")
        return None
    admin = db.query(Admin).filter(Admin.phone == settings.ADMIN_PHONE).first()
    if admin:
        return admin
    admin = Admin(
        first_name=settings.ADMIN_FIRST_NAME,
        last_name=settings.ADMIN_LAST_NAME,
        email=settings.ADMIN_EMAIL.lower(),
        phone=settings.ADMIN_PHONE,
    )
    db.add(admin)
    db.commit()
    logger.info("Seeded administrator %s", admin.phone)
    return admin


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = seed_vehicle_types(db)
        logger.info("Vehicle type catalog seeded (%d new)", added)
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    init_db()
