# tests/conftest.py
import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFICATION_DELAY_MS"] = "0"
os.environ["OVERDUE_SWEEP_MINUTES"] = "0"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import User, Task, Identity  # registers every table
from app.services.task_service import TaskService
from app.services.user_service import UserDirectoryService
from main import app

ADMIN_PASSWORD = "admin-pass"
USER_PASSWORD = "user-pass"


@pytest.fixture()
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def users(db) -> UserDirectoryService:
    return UserDirectoryService(db)


@pytest.fixture()
def tasks(db) -> TaskService:
    return TaskService(db)


@pytest.fixture()
def admin(users) -> User:
    return users.create("Admin", "admin@x.com", ADMIN_PASSWORD, role="admin")


@pytest.fixture()
def alice(users) -> User:
    return users.create("A", "a@x.com", USER_PASSWORD, role="user")


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def login(client: TestClient, email: str, password: str) -> dict:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client, admin) -> dict:
    return login(client, "admin@x.com", ADMIN_PASSWORD)


@pytest.fixture()
def alice_headers(client, alice) -> dict:
    return login(client, "a@x.com", USER_PASSWORD)
