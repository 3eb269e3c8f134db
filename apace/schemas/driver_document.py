from __future__ import annotations
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from apace.models.driver_document_model import DOCUMENT_FIELDS

# Document payloads keep the snake_case keys the driver apps already consume.


class DocumentSlot(BaseModel):
    uploaded: bool
    path: Optional[str] = None


class DocumentSet(BaseModel):
    driving_license: DocumentSlot
    passport_photo: DocumentSlot
    vehicle_rc: DocumentSlot
    insurance_paper: DocumentSlot


class DocumentOwner(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    active: bool
    is_verified: bool
    vehicle_type: str

    model_config = {"from_attributes": True}


class DriverDocumentRead(BaseModel):
    id: Optional[int] = None
    driver_id: UUID
    driver: Optional[DocumentOwner] = None
    status: str
    rejection_reason: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    documents: DocumentSet


class UploadResult(BaseModel):
    id: int
    driver_id: UUID
    status: str
    uploaded_documents: List[str]
    uploaded_at: datetime


class DocumentWithdraw(BaseModel):
    documentType: str

    @field_validator("documentType")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value not in DOCUMENT_FIELDS:
            raise ValueError("Invalid document type. Valid options: " + ", ".join(DOCUMENT_FIELDS))
        return value


class DocumentReject(BaseModel):
    rejectionReason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("rejectionReason")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Rejection reason is required")
        return value.strip()


class DocumentReview(BaseModel):
    id: int
    driver_id: UUID
    status: str
    rejection_reason: Optional[str] = None
    reviewed_at: datetime
    reviewed_by: UUID


class DocumentStatistics(BaseModel):
    total_documents: int
    pending_documents: int
    verified_documents: int
    rejected_documents: int
    uploads_last_30_days: int
    verifications_last_30_days: int
    verification_rate: float
