import logging
from datetime import timedelta
from typing import Dict, Optional

from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from apace.core.errors import BadRequestError, NotFoundError
from apace.database import utcnow
from apace.models.driver_document_model import DOCUMENT_FIELDS, DocumentStatus, DriverDocument
from apace.models.driver_model import Driver
from apace.services import storage_service
from apace.services.notification_service import deliver_pending, notify_documents_reviewed

logger = logging.getLogger(__name__)

# Column -> key used in the documents block of the response
_SLOT_KEYS = {
    "driving_license_path": "driving_license",
    "passport_photo_path": "passport_photo",
    "vehicle_rc_path": "vehicle_rc",
    "insurance_paper_path": "insurance_paper",
}


def format_document(driver: Driver, document: Optional[DriverDocument]) -> dict:
    """
    Shape a driver's document record for clients.

    A driver who never uploaded anything gets the same shape with status
    "not_uploaded" and every slot empty.
    """
    if document is None:
        return {
            "id": None,
            "driver_id": driver.id,
            "driver": driver,
            "status": "not_uploaded",
            "documents": {key: {"uploaded": False, "path": None} for key in _SLOT_KEYS.values()},
        }
    return {
        "id": document.id,
        "driver_id": document.driver_id,
        "driver": driver,
        "status": document.status.value,
        "rejection_reason": document.rejection_reason,
        "uploaded_at": document.uploaded_at,
        "updated_at": document.updated_at,
        "documents": {
            key: {"uploaded": bool(getattr(document, column)), "path": getattr(document, column)}
            for column, key in _SLOT_KEYS.items()
        },
    }


def upload_documents(db: Session, driver: Driver, uploads: Dict[str, UploadFile]) -> dict:
    """
    Store any of the four document categories for a driver.

    Every upload puts the record back to pending review and clears the
    previous rejection reason. Files replaced by a new upload are removed
    from storage once the record is saved.
    """
    uploads = {field: upload for field, upload in uploads.items() if upload is not None}
    if not uploads:
        raise BadRequestError("At least one document must be uploaded")

    # Validate everything before writing anything
    contents = {field: storage_service.validate_upload(field, upload) for field, upload in uploads.items()}

    document = driver.document
    if document is None:
        document = DriverDocument(driver_id=driver.id)
        db.add(document)

    replaced = []
    stored = []
    try:
        for field, upload in uploads.items():
            column = DOCUMENT_FIELDS[field]
            previous = getattr(document, column)
            if previous:
                replaced.append(previous)
            path = storage_service.save_document(driver.id, field, upload.content_type, contents[field])
            stored.append(path)
            setattr(document, column, path)

        document.status = DocumentStatus.PENDING
        document.rejection_reason = None
        document.updated_at = utcnow()
        db.commit()
    except Exception:
        db.rollback()
        # Unsaved record: drop the files written for it
        for path in stored:
            storage_service.delete_file(path)
        raise
    db.refresh(document)

    for path in replaced:
        storage_service.delete_file(path)

    logger.info("Driver %s uploaded documents: %s", driver.id, ", ".join(uploads))
    return {
        "id": document.id,
        "driver_id": document.driver_id,
        "status": document.status.value,
        "uploaded_documents": list(uploads),
        "uploaded_at": document.uploaded_at,
    }


def withdraw_document(db: Session, driver: Driver, document_type: str) -> dict:
    document = driver.document
    if document is None:
        raise NotFoundError("No documents found for this driver")

    column = DOCUMENT_FIELDS[document_type]
    path = getattr(document, column)
    if not path:
        raise BadRequestError(f"{document_type} has not been uploaded yet")

    setattr(document, column, None)
    remaining = len(document.stored_paths())
    if remaining == 0:
        document.status = DocumentStatus.PENDING
        document.rejection_reason = None
    document.updated_at = utcnow()
    db.commit()

    storage_service.delete_file(path)
    logger.info("Driver %s withdrew %s", driver.id, document_type)
    return {
        "withdrawnDocument": document_type,
        "remainingDocuments": remaining,
        "newStatus": document.status.value,
    }


def _document_for_driver(db: Session, driver_id) -> DriverDocument:
    driver = db.get(Driver, driver_id)
    if driver is None:
        raise NotFoundError("Driver not found")
    if driver.document is None:
        raise NotFoundError("No documents found for this driver")
    return driver.document


def verify_documents(db: Session, driver_id, admin_id) -> dict:
    document = _document_for_driver(db, driver_id)
    if document.status == DocumentStatus.VERIFIED:
        raise BadRequestError("Documents are already verified")

    document.status = DocumentStatus.VERIFIED
    document.rejection_reason = None
    document.updated_at = utcnow()
    notify_documents_reviewed(db, document.driver, verified=True)
    db.commit()
    deliver_pending(db)

    logger.info("Admin %s verified documents of driver %s", admin_id, driver_id)
    return _review(document, admin_id)


def reject_documents(db: Session, driver_id, reason: str, admin_id) -> dict:
    """
    Reject a driver's documents.

    Shipments already assigned to the driver are left as they are.
    """
    document = _document_for_driver(db, driver_id)
    if document.status == DocumentStatus.REJECTED:
        raise BadRequestError("Documents are already rejected")

    document.status = DocumentStatus.REJECTED
    document.rejection_reason = reason
    document.updated_at = utcnow()
    notify_documents_reviewed(db, document.driver, verified=False, reason=reason)
    db.commit()
    deliver_pending(db)

    logger.info("Admin %s rejected documents of driver %s: %s", admin_id, driver_id, reason)
    return _review(document, admin_id)


def _review(document: DriverDocument, admin_id) -> dict:
    return {
        "id": document.id,
        "driver_id": document.driver_id,
        "status": document.status.value,
        "rejection_reason": document.rejection_reason,
        "reviewed_at": document.updated_at,
        "reviewed_by": admin_id,
    }


def list_documents(db: Session, status: Optional[DocumentStatus] = None, search: Optional[str] = None):
    """
    Documents for the admin review queue, newest upload first.

    No status means every status; search matches the driver's name,
    email or phone.
    """
    query = db.query(DriverDocument).join(DriverDocument.driver).options(joinedload(DriverDocument.driver))
    if status is not None:
        query = query.filter(DriverDocument.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Driver.first_name.ilike(pattern),
                Driver.last_name.ilike(pattern),
                Driver.email.ilike(pattern),
                Driver.phone.ilike(pattern),
            )
        )
    return query.order_by(DriverDocument.uploaded_at.desc(), DriverDocument.id.desc())


def document_statistics(db: Session) -> dict:
    counts = {status: 0 for status in DocumentStatus}
    for status, in db.query(DriverDocument.status).all():
        counts[status] += 1
    total = sum(counts.values())

    since = utcnow() - timedelta(days=30)
    recent_uploads = db.query(DriverDocument).filter(DriverDocument.uploaded_at >= since).count()
    recent_verifications = (
        db.query(DriverDocument)
        .filter(DriverDocument.status == DocumentStatus.VERIFIED, DriverDocument.updated_at >= since)
        .count()
    )

    return {
        "total_documents": total,
        "pending_documents": counts[DocumentStatus.PENDING],
        "verified_documents": counts[DocumentStatus.VERIFIED],
        "rejected_documents": counts[DocumentStatus.REJECTED],
        "uploads_last_30_days": recent_uploads,
        "verifications_last_30_days": recent_verifications,
        "verification_rate": round(counts[DocumentStatus.VERIFIED] / total * 100, 2) if total else 0.0,
    }


def delete_document(db: Session, document_id: int) -> dict:
    """
    Remove a document record and its stored files.

    The driver's verification is derived from this record, so the driver
    reads as unverified as soon as it is gone.
    """
    document = db.get(DriverDocument, document_id)
    if document is None:
        raise NotFoundError("Document not found")

    paths = document.stored_paths()
    driver_id = document.driver_id
    db.delete(document)
    db.commit()

    for path in paths:
        storage_service.delete_file(path)

    logger.info("Deleted document %s of driver %s (%d files)", document_id, driver_id, len(paths))
    return {"id": document_id, "driver_id": driver_id}
