import logging
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apace.core.deps import Role
from apace.core.errors import AuthenticationError, BadRequestError, NotFoundError, PermissionDeniedError
from apace.core.security import create_token_pair, decode_refresh_token
from apace.models.admin_model import Admin
from apace.models.driver_model import AvailabilityStatus, Driver
from apace.models.user_model import User
from apace.schemas.driver import DriverRead
from apace.schemas.user import AdminRead, UserRead
from apace.services import otp_service
from apace.services.vehicle_type_service import require_active_type

logger = logging.getLogger(__name__)

_MODELS = {Role.USER: User, Role.DRIVER: Driver, Role.ADMIN: Admin}
_READ_SCHEMAS = {Role.USER: UserRead, Role.DRIVER: DriverRead, Role.ADMIN: AdminRead}
_LABELS = {Role.USER: "account", Role.DRIVER: "driver account", Role.ADMIN: "admin account"}


def serialize_account(account, role: Role) -> dict:
    data = _READ_SCHEMAS[role].model_validate(account).model_dump(by_alias=True, mode="json")
    data["role"] = role.value
    return data


def _token_response(account, role: Role) -> dict:
    return {
        "status": "success",
        **create_token_pair(str(account.id), role.value),
        "data": {"user": serialize_account(account, role)},
    }


def _find_by_phone(db: Session, role: Role, phone: str):
    model = _MODELS[role]
    return db.query(model).filter(model.phone == phone).first()


def request_otp(db: Session, phone: str, role: Role) -> None:
    """
    Send a login code.

    Customers may request a code for a number that has no account yet
    (signup follows verification). Drivers and admins must already exist.
    """
    account = _find_by_phone(db, role, phone)
    if account is None and role == Role.DRIVER:
        raise PermissionDeniedError("Driver not registered. Please sign up first.")
    if account is None and role == Role.ADMIN:
        raise PermissionDeniedError("No administrator is registered with this phone number")
    if account is not None and not account.active:
        raise PermissionDeniedError(f"Your {_LABELS[role]} has been deactivated. Please contact support.")
    otp_service.issue_otp(db, phone, role.value)


def verify_login(db: Session, phone: str, otp: str, role: Role) -> dict:
    otp_service.verify_otp(db, phone, role.value, otp)

    account = _find_by_phone(db, role, phone)
    if account is None:
        if role == Role.USER:
            # Code stays verified so signup can consume it
            return {"status": "success", "isNewUser": True, "data": {"phone": phone}}
        raise NotFoundError("Account not found")
    if not account.active:
        raise AuthenticationError(f"Your {_LABELS[role]} has been deactivated. Please contact support.")

    otp_service.discard(db, phone, role.value)
    db.commit()
    logger.info("%s %s authenticated via OTP", role.value.capitalize(), account.id)
    return _token_response(account, role)


def _ensure_unique(db: Session, model, **fields) -> None:
    clauses = [getattr(model, name) == value for name, value in fields.items()]
    existing = db.query(model).filter(or_(*clauses)).first()
    if existing is None:
        return
    for name, value in fields.items():
        if getattr(existing, name) == value:
            raise BadRequestError(f"{name.replace('_', ' ').capitalize()} is already registered")


def signup_user(db: Session, payload) -> dict:
    _ensure_unique(db, User, email=payload.email.lower(), phone=payload.phone)
    otp_service.consume_verified_otp(db, payload.phone, Role.USER.value)

    user = User(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email.lower(),
        phone=payload.phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("New customer registered: %s", user.id)
    return _token_response(user, Role.USER)


def signup_driver(db: Session, payload) -> dict:
    """
    Register a driver. The driver starts offline and unverified until
    documents are uploaded and approved.
    """
    _ensure_unique(
        db, Driver, email=payload.email.lower(), phone=payload.phone, vehicle_number=payload.vehicle_number
    )
    vehicle_type = require_active_type(db, payload.vehicle_type)

    driver = Driver(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email.lower(),
        phone=payload.phone,
        vehicle_type=vehicle_type.vehicle_type,
        vehicle_capacity=payload.vehicle_capacity,
        vehicle_number=payload.vehicle_number,
        availability_status=AvailabilityStatus.OFFLINE,
    )
    db.add(driver)
    db.commit()
    db.refresh(driver)
    logger.info("New driver registered: %s (%s)", driver.id, driver.vehicle_type)
    return _token_response(driver, Role.DRIVER)


def refresh_tokens(db: Session, refresh_token: str, role: Role) -> dict:
    payload = decode_refresh_token(refresh_token)
    if payload["role"] != role.value:
        raise AuthenticationError(f"Invalid token for {role.value} authentication")
    try:
        account_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid or expired token. Please log in again.")

    account = db.get(_MODELS[role], account_id)
    if account is None:
        raise AuthenticationError("The account belonging to this token no longer exists")
    if not account.active:
        raise AuthenticationError(f"Your {_LABELS[role]} has been deactivated. Please contact support.")
    return _token_response(account, role)
