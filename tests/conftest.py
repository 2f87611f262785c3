import os
import time
import uuid

# Settings are read at import time; point them at throwaway values first.
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_KEY"] = "anon.test.key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service.test.key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from essence.database import get_session
from essence.main import app
from essence.models.product import Product
from essence.models.user import Profile, UserRole
from essence.seed import seed_catalog

API = "/api/v1"


def make_token(user_id: uuid.UUID, email: str, full_name: str | None = None) -> str:
    claims = {
        "sub": str(user_id),
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    if full_name is not None:
        claims["user_metadata"] = {"full_name": full_name}
    return jwt.encode(claims, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def auth_headers(user_id: uuid.UUID, email: str, full_name: str | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, email, full_name)}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def products(session):
    """The starter catalog, keyed by product name."""
    seed_catalog(session)
    return {p.name: p for p in session.exec(select(Product)).all()}


@pytest.fixture
def customer_id():
    return uuid.uuid4()


@pytest.fixture
def customer(customer_id):
    return auth_headers(customer_id, "alice@essence-shop.com", "Alice Carter")


@pytest.fixture
def other_customer():
    return auth_headers(uuid.uuid4(), "bob@essence-shop.com")


@pytest.fixture
def admin(session):
    admin_id = uuid.uuid4()
    session.add(Profile(id=admin_id, email="admin@essence-shop.com", full_name="Admin"))
    session.commit()
    session.add(UserRole(user_id=admin_id, role="admin"))
    session.commit()
    return auth_headers(admin_id, "admin@essence-shop.com")
