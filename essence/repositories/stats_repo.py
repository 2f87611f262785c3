# essence/repositories/stats_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from essence.models.order import Order, OrderItem


class StatsRepository:
    """
    Read-only aggregated queries for the account dashboard.
    """

    def count_orders(self, session: Session, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_spent(self, session: Session, user_id: uuid.UUID) -> float:
        """
        Sum of total_amount over the user's non-cancelled orders.
        """
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
            Order.user_id == user_id,
            Order.status != "cancelled",
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def recent_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        limit: int = 3,
    ) -> list[tuple[Order, int]]:
        """
        Latest N orders of the user with their total item quantity.
        """
        item_count = func.coalesce(func.sum(OrderItem.quantity), 0)
        stmt = (
            select(Order, item_count.label("item_count"))
            .join(OrderItem, OrderItem.order_id == Order.id, isouter=True)
            .where(Order.user_id == user_id)
            .group_by(Order.id)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
