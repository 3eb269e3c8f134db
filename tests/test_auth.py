from datetime import timedelta

import pytest

from apace.core.config import parse_duration
from apace.core.security import create_refresh_token, decode_access_token
from apace.database import utcnow
from apace.models import OtpVerification
from apace.services import otp_service
from tests.conftest import auth_header

CODE = "123456"


@pytest.fixture(autouse=True)
def fixed_otp(monkeypatch):
    monkeypatch.setattr(otp_service, "generate_otp", lambda: CODE)


@pytest.fixture(autouse=True)
def _catalog(catalog):
    pass


def login(client, prefix, phone, code=CODE):
    client.post(f"{prefix}/request-otp", json={"phone": phone})
    return client.post(f"{prefix}/verify-otp", json={"phone": phone, "otp": code})


# Customers

def test_new_customer_verifies_then_signs_up(client):
    phone = "+254722000001"

    verified = login(client, "/api/auth", phone)
    assert verified.status_code == 200
    assert verified.json()["isNewUser"] is True
    assert "token" not in verified.json()

    signup = client.post(
        "/api/auth/signup",
        json={"firstName": "Grace", "lastName": "Wanjiru", "email": "Grace@Example.com", "phone": phone},
    )
    assert signup.status_code == 201
    body = signup.json()
    assert body["token"] and body["refreshToken"]
    user = body["data"]["user"]
    assert user["role"] == "user"
    assert user["email"] == "grace@example.com"

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["phone"] == phone


def test_signup_without_verified_phone_is_rejected(client):
    response = client.post(
        "/api/auth/signup",
        json={"firstName": "Grace", "lastName": "Wanjiru", "email": "grace@example.com", "phone": "+254722000002"},
    )
    assert response.status_code == 400
    assert "not been verified" in response.json()["message"]


def test_signup_with_taken_email_is_rejected(client, make_user):
    make_user(email="taken@example.com")
    phone = "+254722000003"
    login(client, "/api/auth", phone)

    response = client.post(
        "/api/auth/signup",
        json={"firstName": "Grace", "lastName": "Wanjiru", "email": "taken@example.com", "phone": phone},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Email is already registered"


def test_existing_customer_logs_in_and_code_is_single_use(client, make_user):
    user = make_user()

    response = login(client, "/api/auth", user.phone)
    assert response.status_code == 200
    body = response.json()
    assert body["isNewUser"] is False
    assert decode_access_token(body["token"])["sub"] == str(user.id)

    reused = client.post("/api/auth/verify-otp", json={"phone": user.phone, "otp": CODE})
    assert reused.status_code == 400


def test_wrong_code_is_rejected(client, make_user):
    user = make_user()

    response = login(client, "/api/auth", user.phone, code="654321")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OTP"


def test_expired_code_is_rejected(client, db, make_user):
    user = make_user()
    client.post("/api/auth/request-otp", json={"phone": user.phone})
    record = db.query(OtpVerification).one()
    record.expires_at = utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.post("/api/auth/verify-otp", json={"phone": user.phone, "otp": CODE})

    assert response.status_code == 400
    assert "expired" in response.json()["message"]


def test_malformed_phone_is_a_validation_error(client):
    response = client.post("/api/auth/request-otp", json={"phone": "call me"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "phone"


def test_deactivated_customer_cannot_request_code(client, make_user):
    user = make_user(active=False)
    response = client.post("/api/auth/request-otp", json={"phone": user.phone})
    assert response.status_code == 403


# Drivers

def driver_signup(**overrides):
    payload = {
        "firstName": "Otieno",
        "lastName": "Kamau",
        "email": "otieno@example.com",
        "phone": "+254733000001",
        "vehicleType": "Van",
        "vehicleCapacity": "800 kg",
        "vehicleNumber": "ka01 ab1234",
    }
    payload.update(overrides)
    return payload


def test_driver_signup_registers_offline_unverified_driver(client):
    response = client.post("/api/driver-auth/signup", json=driver_signup())

    assert response.status_code == 201
    driver = response.json()["data"]["user"]
    assert driver["role"] == "driver"
    assert driver["vehicleType"] == "van"
    assert driver["vehicleNumber"] == "KA01 AB1234"
    assert driver["availability_status"] == "offline"
    assert driver["isVerified"] is False
    assert driver["documentsStatus"] == "not_uploaded"


@pytest.mark.parametrize(
    "overrides",
    [
        {"vehicleNumber": "KA1 AB1234"},
        {"firstName": "R2D2"},
        {"vehicleType": "spaceship"},
    ],
)
def test_driver_signup_validation(client, overrides):
    response = client.post("/api/driver-auth/signup", json=driver_signup(**overrides))
    assert response.status_code == 400


def test_driver_signup_duplicate_vehicle_number(client, make_driver):
    make_driver(vehicle_number="KA01 AB1234")

    response = client.post("/api/driver-auth/signup", json=driver_signup())

    assert response.status_code == 400
    assert response.json()["message"] == "Vehicle number is already registered"


def test_unregistered_driver_cannot_request_code(client):
    response = client.post("/api/driver-auth/request-otp", json={"phone": "+254733999999"})
    assert response.status_code == 403


def test_driver_login(client, make_driver):
    driver = make_driver()

    response = login(client, "/api/driver-auth", driver.phone)

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == str(driver.id)


def test_customer_code_does_not_log_in_driver(client, make_driver):
    driver = make_driver()
    client.post("/api/auth/request-otp", json={"phone": driver.phone})

    response = client.post("/api/driver-auth/verify-otp", json={"phone": driver.phone, "otp": CODE})

    assert response.status_code == 400


# Administrators

def test_admin_login(client, admin):
    response = login(client, "/api/admin-auth", admin.phone)

    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == "admin"


def test_unknown_admin_cannot_request_code(client):
    response = client.post("/api/admin-auth/request-otp", json={"phone": "+254744000000"})
    assert response.status_code == 403


# Tokens and guards

def test_refresh_issues_new_pair(client, make_user):
    user = make_user()

    response = client.post(
        "/api/auth/refresh-token", json={"refreshToken": create_refresh_token(str(user.id), "user")}
    )

    assert response.status_code == 200
    assert decode_access_token(response.json()["token"])["role"] == "user"


def test_access_token_is_not_a_refresh_token(client, make_user):
    user = make_user()
    access = auth_header(user, "user")["Authorization"].split()[1]

    response = client.post("/api/auth/refresh-token", json={"refreshToken": access})

    assert response.status_code == 401


def test_refresh_token_is_bound_to_role(client, make_user):
    user = make_user()

    response = client.post(
        "/api/driver-auth/refresh-token", json={"refreshToken": create_refresh_token(str(user.id), "user")}
    )

    assert response.status_code == 401


def test_missing_token_is_401(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["message"].startswith("You are not logged in")


def test_wrong_role_is_403(client, make_user):
    user = make_user()
    response = client.get("/api/drivers/me", headers=auth_header(user, "user"))
    assert response.status_code == 403


def test_deactivated_account_token_is_401(client, make_user):
    user = make_user(active=False)
    response = client.get("/api/users/me", headers=auth_header(user, "user"))
    assert response.status_code == 401


def test_logout_requires_matching_role(client, make_driver):
    driver = make_driver()
    headers = auth_header(driver, "driver")

    assert client.post("/api/driver-auth/logout", headers=headers).status_code == 200
    assert client.post("/api/auth/logout", headers=headers).status_code == 403


@pytest.mark.parametrize(
    "value, expected",
    [("24h", timedelta(hours=24)), ("7d", timedelta(days=7)), ("30m", timedelta(minutes=30)), ("90", timedelta(seconds=90))],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("forever")


def test_seeded_admin_can_log_in(client, db, monkeypatch):
    from apace.core.config import settings
    from apace.init_db import seed_admin
    from apace.models import Admin

    monkeypatch.setattr(settings, "ADMIN_PHONE", "+254755000000")
    seed_admin(db)
    seed_admin(db)
    assert db.query(Admin).count() == 1

    response = login(client, "/api/admin-auth", "+254755000000")

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == settings.ADMIN_EMAIL
