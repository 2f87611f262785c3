# essence/services/address_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from essence.models.address import Address
from essence.repositories.address_repo import AddressRepository
from essence.schemas.address import AddressCreate


class AddressService:
    """
    Saved shipping addresses.

    At most one default per user; the first saved address becomes it.
    """

    def __init__(self, repo: AddressRepository):
        self.repo = repo

    def list_addresses(self, session: Session, user_id: uuid.UUID) -> list[Address]:
        return self.repo.list_for_user(session, user_id)

    def get_address(
        self, session: Session, user_id: uuid.UUID, address_id: uuid.UUID
    ) -> Address:
        address = self.repo.get_for_user(session, user_id, address_id)
        if address is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Address not found",
            )
        return address

    def create_address(
        self, session: Session, user_id: uuid.UUID, payload: AddressCreate
    ) -> Address:
        is_default = payload.is_default or not self.repo.list_for_user(session, user_id)
        if is_default:
            self.repo.unset_defaults(session, user_id)

        address = Address(
            user_id=user_id,
            **payload.model_dump(exclude={"is_default"}),
            is_default=is_default,
        )
        return self.repo.create(session, address)

    def delete_address(
        self, session: Session, user_id: uuid.UUID, address_id: uuid.UUID
    ) -> None:
        """Delete an address; when it was the default, the newest remaining one takes over."""
        address = self.get_address(session, user_id, address_id)
        was_default = address.is_default
        self.repo.delete(session, address)

        if was_default:
            remaining = self.repo.list_for_user(session, user_id)
            if remaining:
                self.repo.make_default(session, remaining[0])
