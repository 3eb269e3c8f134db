from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apace.database import get_db
from apace.core.deps import Principal, require_user
from apace.schemas.common import Envelope
from apace.schemas.user import UserRead, UserUpdate
from apace.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/me", response_model=Envelope[UserRead])
def my_profile(principal: Principal = Depends(require_user)):
    return {"data": principal.account}


@router.patch("/me", response_model=Envelope[UserRead])
def update_my_profile(
    update_data: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    user = user_service.update_profile(db, principal.account, update_data)
    return {"message": "Profile updated", "data": user}
