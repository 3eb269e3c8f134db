import logging

from sqlalchemy.orm import Session

from apace.models.preferences_model import UserPreferences
from apace.models.user_model import User
from apace.services.vehicle_type_service import require_active_type

logger = logging.getLogger(__name__)


def _find(db: Session, user: User):
    return db.query(UserPreferences).filter(UserPreferences.user_id == user.id).first()


def get_preferences(db: Session, user: User) -> UserPreferences:
    """Customer preferences; a customer who never saved any gets the defaults stored on first read."""
    preferences = _find(db, user)
    if preferences is None:
        preferences = UserPreferences(user_id=user.id)
        db.add(preferences)
        db.commit()
        db.refresh(preferences)
        logger.info("Created default preferences for user %s", user.id)
    return preferences


def update_preferences(db: Session, user: User, payload) -> UserPreferences:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "default_vehicle_type" in changes:
        changes["default_vehicle_type"] = require_active_type(db, changes["default_vehicle_type"]).vehicle_type

    preferences = _find(db, user)
    if preferences is None:
        preferences = UserPreferences(user_id=user.id)
        db.add(preferences)
    for field, value in changes.items():
        setattr(preferences, field, value)
    db.commit()
    db.refresh(preferences)
    logger.info("User %s updated preferences: %s", user.id, ", ".join(changes) or "none")
    return preferences
