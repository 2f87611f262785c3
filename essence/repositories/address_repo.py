# essence/repositories/address_repo.py
import uuid

from sqlmodel import Session, select

from essence.models.address import Address


class AddressRepository:

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[Address]:
        # Default address first, then newest
        stmt = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def get_for_user(
        self, session: Session, user_id: uuid.UUID, address_id: uuid.UUID
    ) -> Address | None:
        address = session.get(Address, address_id)
        if address is None or address.user_id != user_id:
            return None
        return address

    def unset_defaults(self, session: Session, user_id: uuid.UUID) -> None:
        """Clear is_default on every address of the user (no commit)."""
        stmt = select(Address).where(
            Address.user_id == user_id, Address.is_default == True  # noqa: E712
        )
        for row in session.exec(stmt).all():
            row.is_default = False
            session.add(row)

    def create(self, session: Session, address: Address) -> Address:
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    def delete(self, session: Session, address: Address) -> None:
        session.delete(address)
        session.commit()

    def make_default(self, session: Session, address: Address) -> Address:
        address.is_default = True
        session.add(address)
        session.commit()
        session.refresh(address)
        return address
