# tests/conftest.py
"""Fixtures compartidas: base SQLite en memoria, cliente HTTP y usuarios por rol."""

import os

# Debe definirse antes de importar la aplicación: database.py aborta sin DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("INITIAL_ADMIN_USERNAME", None)
os.environ.pop("INITIAL_ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from belleza_pos.main import app
from belleza_pos.database import Base, get_db
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.core.security import create_access_token, get_password_hash

TEST_PASSWORD = "secret123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def users(db_session):
    """Un usuario activo por cada rol, indexados por UserRole."""
    created = {}
    for role in UserRole:
        user = User(
            username=role.value.lower(),
            password_hash=get_password_hash(TEST_PASSWORD),
            first_name=role.description,
            last_name="Test",
            email=f"{role.value.lower()}@belleza.test",
            role=role,
        )
        db_session.add(user)
        created[role] = user
    db_session.commit()
    return created


@pytest.fixture
def auth_headers(users):
    """Devuelve una función que arma el header Authorization para un rol."""
    def _headers(role: UserRole = UserRole.ADMIN) -> dict:
        token = create_access_token(subject=str(users[role].id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers(UserRole.ADMIN)
