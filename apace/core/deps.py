import enum
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from apace.core.errors import AuthenticationError, PermissionDeniedError
from apace.core.security import decode_access_token
from apace.database import get_db
from apace.models.admin_model import Admin
from apace.models.driver_model import Driver
from apace.models.user_model import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Role(str, enum.Enum):
    USER = "user"
    DRIVER = "driver"
    ADMIN = "admin"


_ACCOUNT_MODELS = {
    Role.USER: User,
    Role.DRIVER: Driver,
    Role.ADMIN: Admin,
}


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, resolved once per request from the token's role claim."""

    role: Role
    account: Union[User, Driver, Admin]

    @property
    def id(self) -> uuid.UUID:
        return self.account.id


def resolve_principal(db: Session, token: str) -> Principal:
    payload = decode_access_token(token)
    try:
        role = Role(payload["role"])
        account_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid or expired token. Please log in again.")

    account = db.get(_ACCOUNT_MODELS[role], account_id)
    if account is None:
        raise AuthenticationError("The account belonging to this token no longer exists")
    if not account.active:
        raise AuthenticationError("Your account has been deactivated. Please contact support.")
    return Principal(role=role, account=account)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise AuthenticationError("You are not logged in. Please log in to get access.")
    return resolve_principal(db, credentials.credentials)


def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Principal when a valid token is sent, otherwise None. Used by guest-capable endpoints."""
    if credentials is None:
        return None
    try:
        return resolve_principal(db, credentials.credentials)
    except AuthenticationError as exc:
        logger.info("Ignoring unusable bearer token: %s", exc.message)
        return None


def require_role(*roles: Role):
    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise PermissionDeniedError("You do not have permission to perform this action")
        return principal

    return checker


# Shortcuts used across routers
require_user = require_role(Role.USER)
require_driver = require_role(Role.DRIVER)
require_admin = require_role(Role.ADMIN)
require_driver_or_admin = require_role(Role.DRIVER, Role.ADMIN)
