import pytest

from apace.models import DocumentStatus
from tests.conftest import auth_header, guest_booking


@pytest.fixture(autouse=True)
def _catalog(catalog):
    pass


# Candidate query

def test_available_drivers_match_type_verification_and_activity(client, admin_headers, make_driver):
    match = make_driver(vehicle_type="van", first_name="Amos")
    offline = make_driver(vehicle_type="van", online=False, first_name="Brian")
    make_driver(vehicle_type="truck")
    make_driver(vehicle_type="van", document_status=DocumentStatus.PENDING)
    make_driver(vehicle_type="van", active=False)

    everyone = client.get("/api/drivers/available?vehicleType=Van", headers=admin_headers).json()["data"]
    assert [d["id"] for d in everyone] == [str(match.id), str(offline.id)]
    assert all(d["isVerified"] for d in everyone)

    online = client.get("/api/drivers/available?vehicleType=van&onlineOnly=true", headers=admin_headers).json()
    assert [d["id"] for d in online["data"]] == [str(match.id)]


def test_available_drivers_require_vehicle_type(client, admin_headers):
    response = client.get("/api/drivers/available", headers=admin_headers)
    assert response.status_code == 400


# Own profile and availability

def test_driver_goes_online(client, make_driver):
    driver = make_driver(online=False)
    headers = auth_header(driver, "driver")

    response = client.patch("/api/drivers/me/status", json={"availability_status": "online"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "You are now online"
    status = client.get("/api/drivers/me/status", headers=headers).json()["data"]
    assert status["availability_status"] == "online"


def test_invalid_availability_is_rejected(client, make_driver):
    driver = make_driver()
    response = client.patch(
        "/api/drivers/me/status", json={"availability_status": "busy"}, headers=auth_header(driver, "driver")
    )
    assert response.status_code == 400


def test_driver_updates_profile(client, make_driver):
    driver = make_driver()

    response = client.patch(
        "/api/drivers/me", json={"vehicleCapacity": "1000 kg"}, headers=auth_header(driver, "driver")
    )

    assert response.status_code == 200
    assert response.json()["data"]["vehicleCapacity"] == "1000 kg"


def test_customer_updates_profile(client, make_user):
    user = make_user()

    response = client.patch("/api/users/me", json={"firstName": "Janet"}, headers=auth_header(user, "user"))

    assert response.status_code == 200
    assert response.json()["data"]["firstName"] == "Janet"


# Admin account management

def test_admin_deactivates_customer(client, admin_headers, make_user):
    user = make_user()

    response = client.patch(f"/api/admin/users/{user.id}/active", json={"active": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["active"] is False
    assert client.get("/api/users/me", headers=auth_header(user, "user")).status_code == 401


def test_admin_lists_drivers_by_verification(client, admin_headers, make_driver):
    verified = make_driver()
    make_driver(document_status=DocumentStatus.REJECTED)
    make_driver(document_status=None)

    response = client.get("/api/admin/drivers?verified=true", headers=admin_headers)

    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["data"][0]["id"] == str(verified.id)

    unverified = client.get("/api/admin/drivers?verified=false", headers=admin_headers).json()
    assert unverified["pagination"]["total"] == 2


def test_admin_searches_customers(client, admin_headers, make_user):
    make_user(first_name="Wanjiku")
    make_user(first_name="Achieng")

    response = client.get("/api/admin/users?search=wanj", headers=admin_headers)

    assert [u["firstName"] for u in response.json()["data"]] == ["Wanjiku"]


def test_admin_deactivates_driver(client, admin_headers, make_driver):
    driver = make_driver()

    response = client.patch(f"/api/admin/drivers/{driver.id}/active", json={"active": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Driver deactivated"


# Dashboard

def test_dashboard_stats(client, admin_headers, make_user, make_driver):
    make_user()
    make_driver()
    make_driver(document_status=DocumentStatus.PENDING, online=False)
    shipment = client.post("/api/shipments", json=guest_booking()).json()["data"]
    client.post("/api/shipments", json=guest_booking(price=10))
    client.patch(f"/api/shipments/admin/{shipment['id']}", json={"paymentStatus": "paid"}, headers=admin_headers)

    response = client.get("/api/admin/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["users"]["total"] == 1
    assert stats["drivers"] == {"total": 2, "verified": 1, "online": 1}
    assert stats["shipments"]["total"] == 2
    assert stats["shipments"]["byStatus"]["pending"] == 2
    assert stats["revenue"] == 45.75
    assert stats["pendingDocuments"] == 1


def test_shipment_trends_are_zero_filled(client, admin_headers):
    client.post("/api/shipments", json=guest_booking())

    response = client.get("/api/admin/dashboard/shipment-trends?days=5", headers=admin_headers)

    trends = response.json()["data"]
    assert len(trends) == 5
    assert [day["count"] for day in trends] == [0, 0, 0, 0, 1]
