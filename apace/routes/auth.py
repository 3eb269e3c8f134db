from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from apace.database import get_db
from apace.core.deps import Principal, Role, require_user
from apace.schemas.common import MessageResponse
from apace.schemas.user import OtpRequest, OtpVerify, RefreshTokenRequest, TokenResponse, UserSignup
from apace.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth - Customers"])


@router.post("/request-otp", response_model=MessageResponse)
def request_otp(otp_request: OtpRequest, db: Session = Depends(get_db)):
    auth_service.request_otp(db, otp_request.phone, Role.USER)
    return {"message": "OTP sent successfully"}


@router.post("/verify-otp", response_model=TokenResponse, response_model_exclude_none=True)
def verify_otp(otp_verify: OtpVerify, db: Session = Depends(get_db)):
    """
    Log in with a code. For a number with no account yet the response
    carries isNewUser=true and the client should continue to /signup.
    """
    return auth_service.verify_login(db, otp_verify.phone, otp_verify.otp, Role.USER)


@router.post(
    "/signup",
    response_model=TokenResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(signup_data: UserSignup, db: Session = Depends(get_db)):
    return auth_service.signup_user(db, signup_data)


@router.post("/refresh-token", response_model=TokenResponse, response_model_exclude_none=True)
def refresh_token(token_request: RefreshTokenRequest, db: Session = Depends(get_db)):
    return auth_service.refresh_tokens(db, token_request.refresh_token, Role.USER)


@router.post("/logout", response_model=MessageResponse)
def logout(principal: Principal = Depends(require_user)):
    # Tokens are stateless; the client discards them
    return {"message": "Logged out successfully"}
