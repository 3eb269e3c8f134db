from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from apace.database import get_db
from apace.core.deps import Principal, Role, require_driver
from apace.schemas.common import MessageResponse
from apace.schemas.driver import DriverSignup
from apace.schemas.user import OtpRequest, OtpVerify, RefreshTokenRequest, TokenResponse
from apace.services import auth_service

router = APIRouter(prefix="/api/driver-auth", tags=["Auth - Drivers"])


@router.post(
    "/signup",
    response_model=TokenResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(signup_data: DriverSignup, db: Session = Depends(get_db)):
    """
    Register a driver against an active vehicle type. No OTP is needed;
    the account is usable for assignment only after document review.
    """
    return auth_service.signup_driver(db, signup_data)


@router.post("/request-otp", response_model=MessageResponse)
def request_otp(otp_request: OtpRequest, db: Session = Depends(get_db)):
    auth_service.request_otp(db, otp_request.phone, Role.DRIVER)
    return {"message": "OTP sent successfully"}


@router.post("/verify-otp", response_model=TokenResponse, response_model_exclude_none=True)
def verify_otp(otp_verify: OtpVerify, db: Session = Depends(get_db)):
    return auth_service.verify_login(db, otp_verify.phone, otp_verify.otp, Role.DRIVER)


@router.post("/refresh-token", response_model=TokenResponse, response_model_exclude_none=True)
def refresh_token(token_request: RefreshTokenRequest, db: Session = Depends(get_db)):
    return auth_service.refresh_tokens(db, token_request.refresh_token, Role.DRIVER)


@router.post("/logout", response_model=MessageResponse)
def logout(principal: Principal = Depends(require_driver)):
    return {"message": "Logged out successfully"}
