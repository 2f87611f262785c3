# essence/routers/addresses.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from essence.core.auth import require_auth
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.address_repo import AddressRepository
from essence.schemas.address import AddressCreate, AddressRead
from essence.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["Addresses"])

service = AddressService(AddressRepository())


@router.get("", response_model=list[AddressRead])
def list_my_addresses(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Saved shipping addresses, default first.
    """
    return service.list_addresses(session, current_user.id)


@router.post("", response_model=AddressRead, status_code=status.HTTP_201_CREATED)
def create_address(
    payload: AddressCreate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Save a new shipping address.

    The first address, or one sent with `is_default=true`, becomes
    the default.
    """
    return service.create_address(session, current_user.id, payload)


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(
    address_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    service.delete_address(session, current_user.id, address_id)
    return None
