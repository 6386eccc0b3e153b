"""Shared fixtures: in-memory SQLite store, TestClient and seeded users."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use")

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.api.deps import get_db_session
from app.main import app
from app.models import RevokedToken, Task, User  # noqa: F401
from app.services.auth import hash_password
from app.services.tokens import issue_token

TEST_PASSWORD = "secret1"


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """HTTP client with the app's session dependency bound to the test store."""

    def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory that stores a user with TEST_PASSWORD."""

    def _make_user(name: str = "Alice", email: str = "alice@mail.com") -> User:
        user = User(name=name, email=email, hashed_password=hash_password(TEST_PASSWORD))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user) -> User:
    return make_user()


@pytest.fixture()
def other_user(make_user) -> User:
    return make_user(name="Bob", email="bob@mail.com")


def _bearer(user: User) -> dict[str, str]:
    token, _ = issue_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Build an Authorization header for any stored user."""
    return _bearer


@pytest.fixture()
def auth_headers(test_user: User) -> dict[str, str]:
    return _bearer(test_user)


@pytest.fixture()
def other_headers(other_user: User) -> dict[str, str]:
    return _bearer(other_user)
