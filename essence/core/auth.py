# essence/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlmodel import Session

from essence.core.config import get_settings
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.user_repo import UserRepository

settings = get_settings()

# auto_error=False => a missing Authorization header does NOT raise
# immediately, so routes can serve guests (unauthenticated visitors).
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()

_email_adapter = TypeAdapter(EmailStr)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _default_name(payload: dict[str, Any], email: str) -> str:
    """
    Display name for a freshly provisioned profile: the sign-up
    metadata `full_name` when present, else the email local part.
    """
    metadata = payload.get("user_metadata") or {}
    full_name = (metadata.get("full_name") or "").strip()
    if full_name:
        return full_name
    return email.split("@", 1)[0] if "@" in email else email


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Profile | None:
    """
    Resolve the current user from a Supabase JWT.

    Flow:
      1. No Authorization header => guest => None.
      2. Decode JWT => extract 'sub' (auth user id) and 'email'.
      3. Find the profile in public.profiles.
      4. If missing, auto-provision it (the email claim must be a valid address).

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    profile = user_repo.get_by_id(session, sub_uuid)
    if profile is None:
        try:
            email = _email_adapter.validate_python(email)
        except ValidationError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email in token",
            )
        profile = user_repo.create(
            session,
            Profile(id=sub_uuid, email=email, full_name=_default_name(payload, email)),
        )

    return profile


def require_auth(user: Profile | None = Depends(get_current_user)) -> Profile:
    """
    Enforce authentication; guests get 401.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(
    user: Profile = Depends(require_auth),
    session: Session = Depends(get_session),
) -> Profile:
    """
    Enforce the admin role (first user_roles row == "admin").

    Raises:
        HTTPException(403): if role is not admin.
    """
    if user_repo.get_role(session, user.id) != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def login_required(detail: str) -> HTTPException:
    """401 raised when a guest attempts a mutation that needs an account."""
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
