import os

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ.pop("ADMIN_PHONE", None)

import itertools

import pytest
from fastapi.testclient import TestClient

from apace.core.config import settings
from apace.core.security import create_access_token
from apace.database import Base, SessionLocal, engine
from apace.init_db import seed_vehicle_types
from apace.main import app
from apace.models import (
    Admin,
    AvailabilityStatus,
    DocumentStatus,
    Driver,
    DriverDocument,
    User,
)

_sequence = itertools.count(1)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def catalog(db):
    seed_vehicle_types(db)


def auth_header(account, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(account.id), role)}"}


@pytest.fixture
def make_user(db):
    def factory(**overrides):
        n = next(_sequence)
        fields = {
            "first_name": "Jane",
            "last_name": "Customer",
            "email": f"customer{n}@example.com",
            "phone": f"+2547000{n:05d}",
        }
        fields.update(overrides)
        user = User(**fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return factory


@pytest.fixture
def make_admin(db):
    def factory(**overrides):
        n = next(_sequence)
        fields = {
            "first_name": "Ada",
            "last_name": "Admin",
            "email": f"admin{n}@example.com",
            "phone": f"+2547100{n:05d}",
        }
        fields.update(overrides)
        admin = Admin(**fields)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return factory


@pytest.fixture
def make_driver(db):
    def factory(vehicle_type="van", online=True, document_status=DocumentStatus.VERIFIED, **overrides):
        n = next(_sequence)
        fields = {
            "first_name": "Dan",
            "last_name": "Driver",
            "email": f"driver{n}@example.com",
            "phone": f"+2547200{n:05d}",
            "vehicle_type": vehicle_type,
            "vehicle_capacity": "800 kg",
            "vehicle_number": f"KA{n % 100:02d} AB{n:04d}",
            "availability_status": AvailabilityStatus.ONLINE if online else AvailabilityStatus.OFFLINE,
        }
        fields.update(overrides)
        driver = Driver(**fields)
        db.add(driver)
        db.flush()
        if document_status is not None:
            db.add(
                DriverDocument(
                    driver_id=driver.id,
                    driving_license_path="uploads/license.pdf",
                    status=document_status,
                )
            )
        db.commit()
        db.refresh(driver)
        return driver

    return factory


@pytest.fixture
def admin(make_admin):
    return make_admin()


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin, "admin")


def guest_booking(**overrides) -> dict:
    payload = {
        "pickupAddress": "12 Harbour Road",
        "deliveryAddress": "48 Market Street",
        "pickupLat": -1.2921,
        "pickupLng": 36.8219,
        "deliveryLat": -1.3032,
        "deliveryLng": 36.7073,
        "weight": 12.5,
        "vehicleType": "van",
        "price": 45.75,
        "distance": 14,
        "userType": "guest",
        "guestName": "Sam Sender",
        "guestPhone": "+254711000111",
        "guestEmail": "sam@example.com",
    }
    payload.update(overrides)
    return {key: value for key, value in payload.items() if value is not None}
