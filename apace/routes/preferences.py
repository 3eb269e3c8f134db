from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apace.database import get_db
from apace.core.deps import Principal, require_user
from apace.schemas.common import Envelope
from apace.schemas.preferences import PreferencesRead, PreferencesUpdate
from apace.services import preferences_service

router = APIRouter(prefix="/api/preferences", tags=["Preferences"])


@router.get("", response_model=Envelope[PreferencesRead])
def my_preferences(db: Session = Depends(get_db), principal: Principal = Depends(require_user)):
    return {"data": preferences_service.get_preferences(db, principal.account)}


@router.put("", response_model=Envelope[PreferencesRead])
def update_my_preferences(
    update_data: PreferencesUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    preferences = preferences_service.update_preferences(db, principal.account, update_data)
    return {"message": "Preferences updated", "data": preferences}
