from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Text, Uuid
from sqlalchemy.orm import relationship
import enum

from apace.database import Base, utcnow


class DocumentStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# Upload field name -> column holding the stored path
DOCUMENT_FIELDS = {
    "drivingLicense": "driving_license_path",
    "passportPhoto": "passport_photo_path",
    "vehicleRC": "vehicle_rc_path",
    "insurancePaper": "insurance_paper_path",
}


class DriverDocument(Base):
    __tablename__ = "driver_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(
        Uuid,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )
    driving_license_path = Column(String(255), nullable=True)
    passport_photo_path = Column(String(255), nullable=True)
    vehicle_rc_path = Column(String(255), nullable=True)
    insurance_paper_path = Column(String(255), nullable=True)
    status = Column(Enum(DocumentStatus), default=DocumentStatus.PENDING, index=True, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    driver = relationship("Driver", back_populates="document")

    def stored_paths(self) -> list:
        return [getattr(self, column) for column in DOCUMENT_FIELDS.values() if getattr(self, column)]
