from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from apace.database import get_db
from apace.core.deps import Principal, require_driver
from apace.schemas.common import Envelope
from apace.schemas.driver_document import DocumentWithdraw, DriverDocumentRead, UploadResult
from apace.services import document_service

router = APIRouter(prefix="/api/driver/documents", tags=["Driver Documents"])


@router.post("/upload", response_model=Envelope[UploadResult])
def upload_documents(
    drivingLicense: Optional[UploadFile] = File(None),
    passportPhoto: Optional[UploadFile] = File(None),
    vehicleRC: Optional[UploadFile] = File(None),
    insurancePaper: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    """
    Upload any of the four documents (JPEG, PNG or PDF, 5MB each).
    Every upload sends the record back to pending review.
    """
    result = document_service.upload_documents(
        db,
        principal.account,
        {
            "drivingLicense": drivingLicense,
            "passportPhoto": passportPhoto,
            "vehicleRC": vehicleRC,
            "insurancePaper": insurancePaper,
        },
    )
    return {"message": "Documents uploaded successfully", "data": result}


@router.get("/me", response_model=Envelope[DriverDocumentRead])
def my_documents(principal: Principal = Depends(require_driver)):
    driver = principal.account
    return {"data": document_service.format_document(driver, driver.document)}


@router.post("/withdraw", response_model=Envelope[dict])
def withdraw_document(
    withdraw: DocumentWithdraw,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    result = document_service.withdraw_document(db, principal.account, withdraw.documentType)
    return {"message": f"{withdraw.documentType} has been withdrawn successfully", "data": result}
