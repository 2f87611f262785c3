# essence/repositories/order_repo.py
import uuid

from sqlmodel import Session, select

from essence.models.order import Order, OrderItem
from essence.models.product import Product


class OrderRepository:
    """
    Orders and their line items.

    Writes only flush; checkout spans order, items and cart rows,
    so OrderService owns the commit.
    """

    def _newest_first(self, stmt, status: str | None, skip: int, limit: int):
        if status:
            stmt = stmt.where(Order.status == status)
        return stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order).where(Order.user_id == user_id)
        return list(session.exec(self._newest_first(stmt, status, skip, limit)).all())

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        return list(session.exec(self._newest_first(stmt, status, skip, limit)).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def place(
        self,
        session: Session,
        order: Order,
        items: list[OrderItem],
    ) -> Order:
        """
        Stage an order with its line items; items get the new order id.
        """
        session.add(order)
        session.flush()
        for item in items:
            item.order_id = order.id
        session.add_all(items)
        session.flush()
        return order

    def set_status(self, session: Session, order: Order, new_status: str) -> Order:
        order.status = new_status
        session.add(order)
        session.flush()
        return order

    def list_items_with_names(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[tuple[OrderItem, str | None]]:
        # Outer join: the product may have been removed from the catalog
        stmt = (
            select(OrderItem, Product.name)
            .join(Product, Product.id == OrderItem.product_id, isouter=True)
            .where(OrderItem.order_id == order_id)
        )
        return list(session.exec(stmt).all())
