import re

import pytest

from apace.models import Notification, NotificationType, VehicleType
from tests.conftest import auth_header, guest_booking

TRACKING_RE = re.compile(r"^APACE-\d{8}-[A-Z0-9]{5}$")


@pytest.fixture(autouse=True)
def _catalog(catalog):
    pass


def test_guest_booking_round_trips_through_tracking(client):
    response = client.post("/api/shipments", json=guest_booking())
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"

    shipment = body["data"]
    assert TRACKING_RE.match(shipment["trackingNumber"])
    assert shipment["status"] == "pending"
    assert shipment["paymentStatus"] == "pending"
    assert shipment["price"] == 45.75
    assert shipment["userType"] == "guest"
    assert shipment["userId"] is None
    assert shipment["guestEmail"] == "sam@example.com"

    tracked = client.get(f"/api/shipments/track/{shipment['trackingNumber']}")
    assert tracked.status_code == 200
    data = tracked.json()["data"]
    assert data["price"] == 45.75
    assert data["vehicleType"] == "van"
    assert data["status"] == "pending"
    assert data["vehicle"] is None


def test_tracking_lookup_is_case_insensitive(client):
    tracking_number = client.post("/api/shipments", json=guest_booking()).json()["data"]["trackingNumber"]

    response = client.get(f"/api/shipments/guest/{tracking_number.lower()}")

    assert response.status_code == 200
    assert response.json()["data"]["trackingNumber"] == tracking_number


def test_unknown_tracking_number_is_404(client):
    response = client.get("/api/shipments/track/APACE-20250101-ZZZZZ")
    assert response.status_code == 404
    assert response.json()["status"] == "fail"


def test_estimated_weight_is_accepted_as_weight(client):
    payload = guest_booking(weight=None)
    payload["estimatedWeight"] = 3

    response = client.post("/api/shipments", json=payload)

    assert response.status_code == 201
    assert response.json()["data"]["weight"] == 3.0


@pytest.mark.parametrize("weight", [None, 0, -2])
def test_weight_is_required_and_positive(client, weight):
    response = client.post("/api/shipments", json=guest_booking(weight=weight))

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert any(error["field"] == "weight" for error in body["errors"])


def test_guest_booking_needs_full_contact_details(client):
    response = client.post("/api/shipments", json=guest_booking(guestEmail=None))

    assert response.status_code == 400
    assert response.json()["status"] == "fail"


def test_guest_booking_rejects_user_id(client, make_user):
    user = make_user()

    response = client.post("/api/shipments", json=guest_booking(userId=str(user.id)))

    assert response.status_code == 400


def test_unknown_vehicle_type_is_400_listing_valid_types(client):
    response = client.post("/api/shipments", json=guest_booking(vehicleType="hovercraft"))

    assert response.status_code == 400
    message = response.json()["message"]
    assert "hovercraft" in message
    assert "van" in message and "truck" in message


def test_inactive_vehicle_type_cannot_be_booked(client, db):
    van = db.query(VehicleType).filter(VehicleType.vehicle_type == "van").one()
    van.is_active = False
    db.commit()

    response = client.post("/api/shipments", json=guest_booking())

    assert response.status_code == 400


def test_vehicle_type_is_normalised_on_booking(client):
    response = client.post("/api/shipments", json=guest_booking(vehicleType="Mini Truck"))

    assert response.status_code == 201
    assert response.json()["data"]["vehicleType"] == "mini_truck"


def authenticated_booking(**overrides):
    fields = {"userType": "authenticated", "guestName": None, "guestPhone": None, "guestEmail": None}
    fields.update(overrides)
    return guest_booking(**fields)


def test_authenticated_booking_binds_customer(client, db, make_user):
    user = make_user()

    response = client.post("/api/shipments", json=authenticated_booking(), headers=auth_header(user, "user"))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["userType"] == "authenticated"
    assert data["userId"] == str(user.id)
    assert data["guestName"] is None

    notification = db.query(Notification).one()
    assert notification.type == NotificationType.BOOKING_CONFIRMED
    assert notification.user_id == user.id


def test_authenticated_booking_without_token_is_401(client):
    response = client.post("/api/shipments", json=authenticated_booking())
    assert response.status_code == 401


def test_authenticated_booking_by_driver_is_403(client, make_driver):
    driver = make_driver()

    response = client.post(
        "/api/shipments", json=authenticated_booking(), headers=auth_header(driver, "driver")
    )

    assert response.status_code == 403


def test_authenticated_booking_rejects_guest_fields(client, make_user):
    user = make_user()
    payload = authenticated_booking(guestName="Someone Else")

    response = client.post("/api/shipments", json=payload, headers=auth_header(user, "user"))

    assert response.status_code == 400


def test_guest_booking_ignores_unusable_token(client):
    response = client.post(
        "/api/shipments", json=guest_booking(), headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 201
    assert response.json()["data"]["userId"] is None


def test_legacy_guest_endpoint_forces_guest_booking(client):
    response = client.post("/api/shipments/guest", json=guest_booking(userType="authenticated"))

    assert response.status_code == 201
    assert response.json()["data"]["userType"] == "guest"


def test_customer_sees_only_own_shipments(client, make_user):
    alice, bob = make_user(), make_user()
    for _ in range(2):
        client.post("/api/shipments", json=authenticated_booking(), headers=auth_header(alice, "user"))
    client.post("/api/shipments", json=authenticated_booking(), headers=auth_header(bob, "user"))

    response = client.get("/api/shipments/my-shipments", headers=auth_header(alice, "user"))

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert all(item["userId"] == str(alice.id) for item in body["data"])

    other = client.get("/api/shipments/my-shipments", headers=auth_header(bob, "user")).json()["data"][0]
    hidden = client.get(f"/api/shipments/my-shipments/{other['id']}", headers=auth_header(alice, "user"))
    assert hidden.status_code == 404


def test_customer_can_cancel_pending_shipment_once(client, make_user):
    user = make_user()
    headers = auth_header(user, "user")
    shipment = client.post("/api/shipments", json=authenticated_booking(), headers=headers).json()["data"]

    cancelled = client.patch(f"/api/shipments/my-shipments/{shipment['id']}/cancel", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["status"] == "cancelled"

    again = client.patch(f"/api/shipments/my-shipments/{shipment['id']}/cancel", headers=headers)
    assert again.status_code == 400


def test_admin_listing_filters_by_status(client, admin_headers, make_user):
    user = make_user()
    headers = auth_header(user, "user")
    first = client.post("/api/shipments", json=authenticated_booking(), headers=headers).json()["data"]
    client.post("/api/shipments", json=authenticated_booking(), headers=headers)
    client.patch(f"/api/shipments/my-shipments/{first['id']}/cancel", headers=headers)

    response = client.get("/api/shipments/admin?status=cancelled", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["data"][0]["id"] == first["id"]


def test_admin_listing_requires_admin(client, make_user):
    user = make_user()
    response = client.get("/api/shipments/admin", headers=auth_header(user, "user"))
    assert response.status_code == 403


def test_admin_marks_shipment_paid_and_customer_is_notified(client, db, admin_headers, make_user):
    user = make_user()
    shipment = client.post(
        "/api/shipments", json=authenticated_booking(), headers=auth_header(user, "user")
    ).json()["data"]

    response = client.patch(
        f"/api/shipments/admin/{shipment['id']}", json={"paymentStatus": "paid"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["paymentStatus"] == "paid"
    types = {n.type for n in db.query(Notification).filter(Notification.user_id == user.id)}
    assert NotificationType.PAYMENT_RECEIVED in types


def test_admin_update_without_fields_is_400(client, admin_headers):
    shipment = client.post("/api/shipments", json=guest_booking()).json()["data"]

    response = client.patch(f"/api/shipments/admin/{shipment['id']}", json={}, headers=admin_headers)

    assert response.status_code == 400
