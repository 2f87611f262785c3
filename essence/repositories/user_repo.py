# essence/repositories/user_repo.py
import uuid

from sqlmodel import Session, select

from essence.models.user import Profile, UserRole


class UserRepository:
    """
    Data access layer for profiles and user_roles.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Profiles -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> Profile | None:
        """Return a Profile by primary key, or None if not found."""
        return session.get(Profile, user_id)

    def list_profiles(
        self, session: Session, skip: int = 0, limit: int = 50
    ) -> list[Profile]:
        """Paginated listing, newest first."""
        stmt = (
            select(Profile)
            .order_by(Profile.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, profile: Profile) -> Profile:
        """Insert a new Profile and return the persisted row."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def update(self, session: Session, profile: Profile) -> Profile:
        """Persist changes to an existing Profile."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    # ----- Roles -----

    def get_role(self, session: Session, user_id: uuid.UUID) -> str:
        """First role row for the user; "user" when there is none."""
        stmt = select(UserRole.role).where(UserRole.user_id == user_id)
        return session.exec(stmt).first() or "user"

    def get_roles(
        self, session: Session, user_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, str]:
        if not user_ids:
            return {}
        stmt = select(UserRole).where(UserRole.user_id.in_(user_ids))
        roles: dict[uuid.UUID, str] = {}
        for row in session.exec(stmt).all():
            roles.setdefault(row.user_id, row.role)
        return roles

    def replace_role(self, session: Session, user_id: uuid.UUID, role: str) -> None:
        """Drop existing role rows for the user, then insert the new one."""
        for row in session.exec(select(UserRole).where(UserRole.user_id == user_id)).all():
            session.delete(row)
        session.add(UserRole(user_id=user_id, role=role))
        session.commit()
