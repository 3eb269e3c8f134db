from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apace.database import get_db
from apace.core.deps import Principal, Role, require_admin
from apace.schemas.common import MessageResponse
from apace.schemas.user import OtpRequest, OtpVerify, RefreshTokenRequest, TokenResponse
from apace.services import auth_service

# Administrators are provisioned by init_db, there is no signup
router = APIRouter(prefix="/api/admin-auth", tags=["Auth - Admins"])


@router.post("/request-otp", response_model=MessageResponse)
def request_otp(otp_request: OtpRequest, db: Session = Depends(get_db)):
    auth_service.request_otp(db, otp_request.phone, Role.ADMIN)
    return {"message": "OTP sent successfully"}


@router.post("/verify-otp", response_model=TokenResponse, response_model_exclude_none=True)
def verify_otp(otp_verify: OtpVerify, db: Session = Depends(get_db)):
    return auth_service.verify_login(db, otp_verify.phone, otp_verify.otp, Role.ADMIN)


@router.post("/refresh-token", response_model=TokenResponse, response_model_exclude_none=True)
def refresh_token(token_request: RefreshTokenRequest, db: Session = Depends(get_db)):
    return auth_service.refresh_tokens(db, token_request.refresh_token, Role.ADMIN)


@router.post("/logout", response_model=MessageResponse)
def logout(principal: Principal = Depends(require_admin)):
    return {"message": "Logged out successfully"}
