import logging
import secrets
from datetime import timedelta

from sqlalchemy.orm import Session

from apace.core.config import settings
from apace.core.errors import BadRequestError
from apace.database import utcnow
from apace.models.otp_model import OtpVerification

logger = logging.getLogger(__name__)


class SmsGateway:
    """Stand-in for the SMS provider; codes are written to the log."""

    def send(self, phone: str, message: str) -> None:
        logger.info("[SMS] to %s: %s", phone, message)


sms_gateway = SmsGateway()


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def issue_otp(db: Session, phone: str, role: str) -> OtpVerification:
    """
    Create or replace the one-time code for a phone number and role, then
    send it. A new request always invalidates the previous code.
    """
    record = (
        db.query(OtpVerification)
        .filter(OtpVerification.phone == phone, OtpVerification.role == role)
        .first()
    )
    if record is None:
        record = OtpVerification(phone=phone, role=role)
        db.add(record)
    record.otp = generate_otp()
    record.expires_at = utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
    record.is_verified = False
    db.commit()

    sms_gateway.send(
        phone,
        f"Your APACE verification code is: {record.otp}. Valid for {settings.OTP_EXPIRE_MINUTES} minutes.",
    )
    logger.info("OTP issued for %s (%s)", phone, role)
    return record


def verify_otp(db: Session, phone: str, role: str, otp: str) -> OtpVerification:
    """
    Check a submitted code.

    Raises:
        BadRequestError: no code requested, code already used, expired or wrong
    """
    record = (
        db.query(OtpVerification)
        .filter(OtpVerification.phone == phone, OtpVerification.role == role)
        .first()
    )
    if record is None or record.is_verified:
        raise BadRequestError("No active OTP for this phone number. Please request a new one.")
    if record.is_expired():
        raise BadRequestError("OTP has expired. Please request a new one.")
    if not secrets.compare_digest(record.otp, otp):
        raise BadRequestError("Invalid OTP")

    record.is_verified = True
    db.commit()
    return record


def consume_verified_otp(db: Session, phone: str, role: str) -> None:
    """
    Use up a code that verify_otp already accepted (signup after verification).

    Raises:
        BadRequestError: phone was not verified, or the verification expired
    """
    record = (
        db.query(OtpVerification)
        .filter(OtpVerification.phone == phone, OtpVerification.role == role)
        .first()
    )
    if record is None or not record.is_verified:
        raise BadRequestError("Phone number has not been verified. Please verify the OTP first.")
    if record.is_expired():
        raise BadRequestError("Phone verification has expired. Please request a new OTP.")
    db.delete(record)


def discard(db: Session, phone: str, role: str) -> None:
    db.query(OtpVerification).filter(OtpVerification.phone == phone, OtpVerification.role == role).delete()
