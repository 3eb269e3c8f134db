import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apace.core.errors import BadRequestError, NotFoundError
from apace.models.user_model import User

logger = logging.getLogger(__name__)


def update_profile(db: Session, user: User, payload) -> User:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequestError("No fields to update")
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("User %s updated profile: %s", user.id, ", ".join(changes))
    return user


def list_users(db: Session, search: Optional[str] = None, active: Optional[bool] = None):
    query = db.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
                User.phone.ilike(pattern),
            )
        )
    if active is not None:
        query = query.filter(User.active.is_(active))
    return query.order_by(User.created_at.desc())


def set_user_active(db: Session, user_id, active: bool) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.active = active
    db.commit()
    db.refresh(user)
    logger.info("User %s %s", user.id, "activated" if active else "deactivated")
    return user
