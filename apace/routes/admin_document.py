from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from apace.database import get_db
from apace.core.deps import Principal, require_admin
from apace.core.errors import BadRequestError
from apace.core.pagination import paginate
from apace.models.driver_document_model import DocumentStatus
from apace.schemas.common import Envelope
from apace.schemas.driver_document import DocumentReject, DocumentReview, DocumentStatistics, DriverDocumentRead
from apace.services import document_service

router = APIRouter(prefix="/api/admin", tags=["Admin - Driver Documents"])


def _status_filter(value: Optional[str]) -> Optional[DocumentStatus]:
    # Absent or empty means every status
    if value is None or not value.strip():
        return None
    try:
        return DocumentStatus(value.strip().lower())
    except ValueError:
        raise BadRequestError("Invalid status. Valid options: pending, verified, rejected")


@router.get("/documents/pending", response_model=Envelope[List[DriverDocumentRead]])
def list_documents(
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """
    Review queue. Without a status filter every document is listed,
    whatever its status.
    """
    query = document_service.list_documents(db, status=_status_filter(status), search=search)
    documents, pagination = paginate(query, page, limit)
    return {
        "data": [document_service.format_document(doc.driver, doc) for doc in documents],
        "pagination": pagination,
    }


@router.get("/documents/statistics", response_model=Envelope[DocumentStatistics])
def document_statistics(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return {"data": document_service.document_statistics(db)}


@router.patch("/documents/{driver_id}/verify", response_model=Envelope[DocumentReview])
def verify_documents(
    driver_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    result = document_service.verify_documents(db, driver_id, principal.id)
    return {"message": "Documents verified successfully", "data": result}


@router.patch("/documents/{driver_id}/reject", response_model=Envelope[DocumentReview])
def reject_documents(
    driver_id: UUID,
    rejection: DocumentReject,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    result = document_service.reject_documents(db, driver_id, rejection.rejectionReason, principal.id)
    return {"message": "Documents rejected successfully", "data": result}


@router.delete("/driver-documents/{document_id}", response_model=Envelope[dict])
def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    result = document_service.delete_document(db, document_id)
    return {"message": "Document deleted successfully", "data": result}
