# essence/routers/users.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from essence.core.auth import require_auth, require_admin
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.cart_repo import CartRepository
from essence.repositories.stats_repo import StatsRepository
from essence.repositories.user_repo import UserRepository
from essence.repositories.wishlist_repo import WishlistRepository
from essence.schemas.stats import AccountOverview
from essence.schemas.user import ProfileRead, ProfileUpdate, UserRoleUpdate
from essence.services.stats_service import StatsService
from essence.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

service = UserService(UserRepository())
stats_service = StatsService(StatsRepository(), CartRepository(), WishlistRepository())


# -------- Self profile --------


@router.get("/me", response_model=ProfileRead)
def read_me(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Return the authenticated user's profile.

    The profile row is auto-created on the first authenticated request.
    """
    return service.get_me(session, current_user)


@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Update the authenticated user's display name.
    """
    return service.update_me(session, current_user, payload)


@router.get("/me/overview", response_model=AccountOverview)
def read_my_overview(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Account dashboard: order count, cart and favorites counts,
    total spent and the three latest orders.
    """
    return stats_service.get_overview(session, current_user)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[ProfileRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List all users with their role, newest first (admin only).
    """
    return service.list_users(session, skip, limit)


@router.patch(
    "/{user_id}/role",
    response_model=ProfileRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: user, admin.
    """
    return service.update_role(session, user_id, payload)
