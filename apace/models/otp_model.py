from sqlalchemy import Column, String, DateTime, Boolean, UniqueConstraint, Uuid
import uuid

from apace.database import Base, utcnow


class OtpVerification(Base):
    __tablename__ = "otp_verifications"
    __table_args__ = (UniqueConstraint("phone", "role", name="uq_otp_phone_role"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    phone = Column(String(20), index=True, nullable=False)
    role = Column(String(10), nullable=False)
    otp = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def is_expired(self) -> bool:
        return utcnow() > self.expires_at
