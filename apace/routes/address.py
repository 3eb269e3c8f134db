from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from apace.database import get_db
from apace.core.deps import Principal, require_user
from apace.schemas.address import AddressCreate, AddressRead, AddressUpdate
from apace.schemas.common import Envelope
from apace.services import address_service

router = APIRouter(prefix="/api/addresses", tags=["Addresses"])


# ----------------------------------------
# Address book
# ----------------------------------------

@router.get("", response_model=Envelope[List[AddressRead]])
def list_my_addresses(db: Session = Depends(get_db), principal: Principal = Depends(require_user)):
    return {"data": address_service.list_addresses(db, principal.id)}


@router.post("", response_model=Envelope[AddressRead], status_code=status.HTTP_201_CREATED)
def create_address(
    address: AddressCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    return {"message": "Address saved", "data": address_service.create_address(db, principal.id, address)}


@router.get("/{address_id}", response_model=Envelope[AddressRead])
def get_address(address_id: UUID, db: Session = Depends(get_db), principal: Principal = Depends(require_user)):
    return {"data": address_service.get_address(db, principal.id, address_id)}


@router.patch("/{address_id}", response_model=Envelope[AddressRead])
def update_address(
    address_id: UUID,
    update_data: AddressUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    address = address_service.update_address(db, principal.id, address_id, update_data)
    return {"message": "Address updated", "data": address}


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(address_id: UUID, db: Session = Depends(get_db), principal: Principal = Depends(require_user)):
    address_service.delete_address(db, principal.id, address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{address_id}/set-default", response_model=Envelope[AddressRead])
def set_default_address(
    address_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
):
    address = address_service.set_default_address(db, principal.id, address_id)
    return {"message": "Default address updated", "data": address}
