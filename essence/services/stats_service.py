# essence/services/stats_service.py
from sqlmodel import Session

from essence.models.user import Profile
from essence.repositories.cart_repo import CartRepository
from essence.repositories.stats_repo import StatsRepository
from essence.repositories.wishlist_repo import WishlistRepository
from essence.schemas.stats import AccountOverview, RecentOrderSummary
from essence.services.order_service import order_reference


class StatsService:
    """
    Orchestrates the figures shown on the customer's account page.
    """

    def __init__(
        self,
        repo: StatsRepository,
        cart_repo: CartRepository,
        wishlist_repo: WishlistRepository,
    ):
        self.repo = repo
        self.cart_repo = cart_repo
        self.wishlist_repo = wishlist_repo

    def get_overview(
        self,
        session: Session,
        user: Profile,
        recent_n_orders: int = 3,
    ) -> AccountOverview:
        recent_orders: list[RecentOrderSummary] = []
        for order, item_count in self.repo.recent_orders(
            session, user.id, limit=recent_n_orders
        ):
            recent_orders.append(
                RecentOrderSummary(
                    id=order.id,
                    reference=order_reference(order.id),
                    created_at=order.created_at,
                    status=order.status,
                    total_amount=order.total_amount,
                    item_count=int(item_count or 0),
                )
            )

        return AccountOverview(
            total_orders=self.repo.count_orders(session, user.id),
            cart_items=self.cart_repo.count_lines(session, user.id),
            favorites=self.wishlist_repo.count_for_user(session, user.id),
            total_spent=round(self.repo.total_spent(session, user.id), 2),
            recent_orders=recent_orders,
        )
