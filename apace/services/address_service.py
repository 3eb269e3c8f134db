import logging
from typing import List

from sqlalchemy.orm import Session

from apace.core.errors import BadRequestError, NotFoundError
from apace.models.address_model import Address

logger = logging.getLogger(__name__)


def list_addresses(db: Session, user_id) -> List[Address]:
    return (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.created_at.desc())
        .all()
    )


def get_address(db: Session, user_id, address_id) -> Address:
    address = db.query(Address).filter(Address.id == address_id, Address.user_id == user_id).first()
    if address is None:
        raise NotFoundError("Address not found")
    return address


def _clear_default(db: Session, user_id) -> None:
    db.query(Address).filter(Address.user_id == user_id, Address.is_default.is_(True)).update(
        {Address.is_default: False}
    )


def create_address(db: Session, user_id, payload) -> Address:
    """
    Save an address to the customer's book.

    The first address a customer saves becomes the default whether or not
    it was asked for.
    """
    first = db.query(Address.id).filter(Address.user_id == user_id).first() is None
    is_default = payload.is_default or first
    if is_default:
        _clear_default(db, user_id)

    address = Address(**payload.model_dump(exclude={"is_default"}), user_id=user_id, is_default=is_default)
    db.add(address)
    db.commit()
    db.refresh(address)
    logger.info("User %s saved address %s (%s)", user_id, address.id, address.label)
    return address


def update_address(db: Session, user_id, address_id, payload) -> Address:
    address = get_address(db, user_id, address_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequestError("No fields to update")

    if changes.get("is_default"):
        _clear_default(db, user_id)
    for field, value in changes.items():
        setattr(address, field, value)
    db.commit()
    db.refresh(address)
    return address


def set_default_address(db: Session, user_id, address_id) -> Address:
    address = get_address(db, user_id, address_id)
    _clear_default(db, user_id)
    address.is_default = True
    db.commit()
    db.refresh(address)
    logger.info("User %s default address is now %s", user_id, address.id)
    return address


def delete_address(db: Session, user_id, address_id) -> None:
    """Delete an address; when it was the default, the newest remaining one takes over."""
    address = get_address(db, user_id, address_id)
    was_default = address.is_default
    db.delete(address)
    db.flush()

    if was_default:
        successor = (
            db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.created_at.desc())
            .first()
        )
        if successor is not None:
            successor.is_default = True
    db.commit()
    logger.info("User %s deleted address %s", user_id, address_id)
