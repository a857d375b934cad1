"""
Shared test fixtures — SQLite test database, test client, auth helpers.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set JWT_SECRET before importing app modules
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from cotizador import models
from cotizador.auth import hash_password
from cotizador.database import Base, get_db
from cotizador.identity import set_role
from cotizador.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_user(email, password="strongpassword123", role=None) -> int:
    """Insert a user (optionally with a role record) and return its id."""
    session = TestingSessionLocal()
    try:
        user = models.User(email=email, password_hash=hash_password(password))
        session.add(user)
        session.flush()
        if role is not None:
            set_role(session, user.id, role)
        session.commit()
        return user.id
    finally:
        session.close()


def login_headers(client, email, password="strongpassword123") -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Plain user with no role record — resolves to 'user'."""
    create_user("test@taller.com")
    return login_headers(client, "test@taller.com")


@pytest.fixture
def other_headers(client):
    """A second plain user, for ownership checks."""
    create_user("otro@taller.com", role=models.RoleName.USER)
    return login_headers(client, "otro@taller.com")


@pytest.fixture
def admin_headers(client):
    create_user("admin@taller.com", role=models.RoleName.ADMIN)
    return login_headers(client, "admin@taller.com")


@pytest.fixture
def materials(client, auth_headers):
    """Two materials for the default user: A costs 10, B costs 20."""
    a = client.post("/api/materials/", json={
        "name": "Madera", "unit": "Centímetros", "cost": 10,
    }, headers=auth_headers)
    b = client.post("/api/materials/", json={
        "name": "Barniz", "unit": "Litros", "cost": 20,
    }, headers=auth_headers)
    assert a.status_code == 201 and b.status_code == 201
    return {"A": a.json()["id"], "B": b.json()["id"]}
