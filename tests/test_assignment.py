import uuid

import pytest

from apace.database import SessionLocal
from apace.models import (
    DocumentStatus,
    Notification,
    NotificationStatus,
    NotificationType,
    Shipment,
    Vehicle,
    VehicleStatus,
)
from apace.services import notification_service, vehicle_service
from tests.conftest import auth_header, guest_booking


@pytest.fixture(autouse=True)
def _catalog(catalog):
    pass


@pytest.fixture
def shipment(client):
    return client.post("/api/shipments", json=guest_booking(vehicleType="van")).json()["data"]


def assign(client, headers, shipment_id, driver, **extra):
    body = {"driverId": str(driver.id), **extra}
    return client.patch(f"/api/shipments/admin/assign/{shipment_id}", json=body, headers=headers)


def test_assignment_binds_driver_and_fleet_vehicle(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")

    response = assign(client, admin_headers, shipment["id"], driver, notes="Fragile load")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["driverId"] == str(driver.id)
    assert data["assignedAt"] is not None
    assert "Fragile load" in data["specialInstructions"]

    vehicle = db.get(Vehicle, uuid.UUID(data["vehicleId"]))
    assert vehicle.driver_id == driver.id
    assert vehicle.vehicle_number == driver.vehicle_number
    assert vehicle.status == VehicleStatus.IN_USE

    driver_alerts = db.query(Notification).filter(Notification.driver_id == driver.id).all()
    assert [n.type for n in driver_alerts] == [NotificationType.NEW_ASSIGNMENT]


def test_tracking_shows_bound_vehicle_after_assignment(client, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], driver)

    tracked = client.get(f"/api/shipments/track/{shipment['trackingNumber']}").json()["data"]

    assert tracked["vehicle"] == {"vehicleNumber": driver.vehicle_number, "type": "van"}


def test_existing_fleet_vehicle_is_reused(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    vehicle = Vehicle(
        vehicle_number="FLEET-001", type="van", license_plate="KBX 123A", driver_id=driver.id
    )
    db.add(vehicle)
    db.commit()

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.json()["data"]["vehicleId"] == str(vehicle.id)
    assert db.query(Vehicle).count() == 1


def test_vehicle_type_mismatch_is_rejected(client, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="truck")

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 400
    assert "does not match" in response.json()["message"]


@pytest.mark.parametrize(
    "driver_kwargs, message",
    [
        ({"active": False}, "Driver account is inactive"),
        ({"document_status": DocumentStatus.PENDING}, "Driver documents are not verified"),
        ({"document_status": DocumentStatus.REJECTED}, "Driver documents are not verified"),
        ({"document_status": None}, "Driver documents are not verified"),
        ({"online": False}, "Driver is offline"),
    ],
)
def test_ineligible_drivers_are_rejected(client, db, admin_headers, make_driver, shipment, driver_kwargs, message):
    driver = make_driver(vehicle_type="van", **driver_kwargs)

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 400
    assert response.json()["message"] == message
    db.expire_all()
    assert db.query(Shipment).one().driver_id is None


def test_unknown_driver_is_404(client, admin_headers, shipment):
    response = client.patch(
        f"/api/shipments/admin/assign/{shipment['id']}",
        json={"driverId": "00000000-0000-0000-0000-000000000000"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_driver_vehicle_in_maintenance_cannot_be_assigned(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    db.add(
        Vehicle(
            vehicle_number="FLEET-002",
            type="van",
            license_plate="KBX 456B",
            driver_id=driver.id,
            status=VehicleStatus.MAINTENANCE,
        )
    )
    db.commit()

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 400
    assert "maintenance" in response.json()["message"]


def test_only_pending_shipments_can_be_assigned(client, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], driver)
    client.patch(
        f"/api/shipments/driver/update-status/{shipment['id']}",
        json={"status": "in_transit"},
        headers=auth_header(driver, "driver"),
    )

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 400


def test_assignment_requires_admin(client, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    response = assign(client, auth_header(driver, "driver"), shipment["id"], driver)
    assert response.status_code == 403


def test_rejecting_documents_later_keeps_existing_assignment(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], driver)

    rejected = client.patch(
        f"/api/admin/documents/{driver.id}/reject",
        json={"rejectionReason": "Licence expired"},
        headers=admin_headers,
    )

    assert rejected.status_code == 200
    db.expire_all()
    assert db.query(Shipment).one().driver_id == driver.id


def test_driver_moves_shipment_through_delivery(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], driver)
    headers = auth_header(driver, "driver")
    url = f"/api/shipments/driver/update-status/{shipment['id']}"

    picked_up = client.patch(url, json={"status": "in_transit"}, headers=headers)
    assert picked_up.status_code == 200
    assert picked_up.json()["data"]["actualPickupDate"] is not None

    delivered = client.patch(url, json={"status": "delivered", "notes": "Left at reception"}, headers=headers)
    assert delivered.status_code == 200
    data = delivered.json()["data"]
    assert data["status"] == "delivered"
    assert data["actualDeliveryDate"] is not None
    assert "Left at reception" in data["specialInstructions"]

    db.expire_all()
    assert db.query(Vehicle).one().status == VehicleStatus.AVAILABLE

    final = client.patch(url, json={"status": "in_transit"}, headers=headers)
    assert final.status_code == 400


def test_same_status_is_rejected(client, admin_headers, shipment):
    response = client.patch(
        f"/api/shipments/driver/update-status/{shipment['id']}",
        json={"status": "pending"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_driver_cannot_update_someone_elses_shipment(client, admin_headers, make_driver, shipment):
    assigned, other = make_driver(vehicle_type="van"), make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], assigned)

    response = client.patch(
        f"/api/shipments/driver/update-status/{shipment['id']}",
        json={"status": "in_transit"},
        headers=auth_header(other, "driver"),
    )

    assert response.status_code == 403


def test_vehicle_stays_in_use_while_another_shipment_is_active(client, db, admin_headers, make_driver):
    driver = make_driver(vehicle_type="van")
    first = client.post("/api/shipments", json=guest_booking()).json()["data"]
    second = client.post("/api/shipments", json=guest_booking()).json()["data"]
    assign(client, admin_headers, first["id"], driver)
    assign(client, admin_headers, second["id"], driver)

    client.patch(
        f"/api/shipments/driver/update-status/{first['id']}", json={"status": "failed"}, headers=admin_headers
    )
    db.expire_all()
    assert db.query(Vehicle).one().status == VehicleStatus.IN_USE

    client.patch(
        f"/api/shipments/driver/update-status/{second['id']}", json={"status": "cancelled"}, headers=admin_headers
    )
    db.expire_all()
    assert db.query(Vehicle).one().status == VehicleStatus.AVAILABLE


def test_driver_lists_assigned_shipments(client, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    assign(client, admin_headers, shipment["id"], driver)

    response = client.get("/api/shipments/driver/assigned", headers=auth_header(driver, "driver"))

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [shipment["id"]]


def test_fleet_vehicle_of_another_type_is_not_bound(client, db, admin_headers, make_driver, shipment):
    driver = make_driver(vehicle_type="van")
    db.add(Vehicle(vehicle_number="FLEET-BIKE", type="bike", license_plate="KMC 001B", driver_id=driver.id))
    db.commit()

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 200
    bound = db.get(Vehicle, uuid.UUID(response.json()["data"]["vehicleId"]))
    assert bound.type == "van"
    assert bound.vehicle_number == driver.vehicle_number


def test_vehicle_registered_to_another_driver_is_not_taken_over(client, db, admin_headers, make_driver, shipment):
    driver, owner = make_driver(vehicle_type="van"), make_driver(vehicle_type="van")
    db.add(Vehicle(vehicle_number=driver.vehicle_number, type="van", license_plate="KDA 777X", driver_id=owner.id))
    db.commit()

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 400
    assert "assigned to another driver" in response.json()["message"]
    db.expire_all()
    assert db.query(Shipment).one().driver_id is None
    assert db.query(Vehicle).one().driver_id == owner.id


# Concurrent modification

@pytest.fixture
def concurrent_edit(monkeypatch):
    """Another request changes the shipment's price once, right after assign_driver has loaded it."""
    resolve = vehicle_service.resolve_driver_vehicle
    fired = []

    def resolve_after_edit(db, driver):
        if not fired:
            fired.append(True)
            other = SessionLocal()
            try:
                other.query(Shipment).one().price = 99
                other.commit()
            finally:
                other.close()
        return resolve(db, driver)

    monkeypatch.setattr(vehicle_service, "resolve_driver_vehicle", resolve_after_edit)


@pytest.fixture
def pushes(monkeypatch):
    sent = []

    def record(token, title, body, data=None):
        sent.append(title)
        return f"local-{len(sent)}"

    monkeypatch.setattr(notification_service.push_gateway, "send", record)
    return sent


def test_lost_version_race_is_a_retryable_conflict(client, db, admin_headers, make_driver, shipment, concurrent_edit):
    driver = make_driver(vehicle_type="van")

    response = assign(client, admin_headers, shipment["id"], driver)

    assert response.status_code == 409
    assert response.json()["retryable"] is True
    db.expire_all()
    stored = db.query(Shipment).one()
    assert stored.driver_id is None
    assert stored.vehicle_id is None
    assert float(stored.price) == 99
    assert db.query(Vehicle).count() == 0


def test_lost_race_sends_no_push_and_retry_does(
    client, db, admin_headers, make_driver, shipment, concurrent_edit, pushes
):
    driver = make_driver(vehicle_type="van")
    client.post(
        "/api/notifications/device-tokens", json={"token": "fcm-driver-0001"}, headers=auth_header(driver, "driver")
    )

    lost = assign(client, admin_headers, shipment["id"], driver)

    assert lost.status_code == 409
    assert pushes == []
    assert db.query(Notification).count() == 0

    retried = assign(client, admin_headers, shipment["id"], driver)

    assert retried.status_code == 200
    assert pushes == ["New Shipment Assignment"]
    db.expire_all()
    assert db.query(Notification).one().status == NotificationStatus.SENT
