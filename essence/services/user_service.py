# essence/services/user_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from essence.models.user import Profile
from essence.repositories.user_repo import UserRepository
from essence.schemas.user import ProfileRead, ProfileUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for profiles and roles.

    Responsibilities:
      - self profile read / edit
      - admin user listing with roles
      - admin role changes
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _to_read(self, profile: Profile, role: str) -> ProfileRead:
        return ProfileRead(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            role=role,
            created_at=profile.created_at,
        )

    # ----- Self profile -----

    def get_me(self, session: Session, current_user: Profile) -> ProfileRead:
        return self._to_read(current_user, self.repo.get_role(session, current_user.id))

    def update_me(
        self,
        session: Session,
        current_user: Profile,
        payload: ProfileUpdate,
    ) -> ProfileRead:
        """
        Partial update for profile edits.
        Only `full_name` is editable.
        """
        if payload.full_name is not None:
            current_user.full_name = payload.full_name
            current_user = self.repo.update(session, current_user)
        return self.get_me(session, current_user)

    # ----- Admin operations -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[ProfileRead]:
        """Users newest first, each with its role (admin only)."""
        profiles = self.repo.list_profiles(session, skip=skip, limit=limit)
        roles = self.repo.get_roles(session, [p.id for p in profiles])
        return [self._to_read(p, roles.get(p.id, "user")) for p in profiles]

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> ProfileRead:
        """
        Replace the user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        profile = self.repo.get_by_id(session, user_id)
        if not profile:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        self.repo.replace_role(session, user_id, payload.role)
        logger.info("User %s role set to %s", user_id, payload.role)
        return self._to_read(profile, payload.role)
