"""Shared test fixtures for backend tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from dailyposts.core.config import Settings
from dailyposts.core.security import hash_password
from dailyposts.main import create_app
from dailyposts.models.user import AdminPatch, NameFilter, NewUser, UserName

TEST_SIGNATURE = "test-signature-long-enough-for-hs256-keys"


@pytest.fixture
def engine():
    """In-memory SQLite with StaticPool so all connections (including threads) share one DB."""
    import dailyposts.models  # noqa: F401 - register models

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def settings(tmp_path):
    storage = tmp_path / "storage"
    storage.mkdir()
    return Settings(
        _env_file=None,
        jwt_signature=TEST_SIGNATURE,
        session_expire="1h",
        upload_dir=storage,
        setup_start="2024-12-01",
        setup_days=3,
    )


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine)


@pytest.fixture
def ctx(app):
    return app.state.context


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(ctx):
    """Insert a user directly through the mapper and return its uid."""

    def _make_user(name: str, password: str = "password", admin: bool = False) -> int:
        ctx.mapper.insert("users", NewUser(name=name, password=hash_password(password)))
        if admin:
            ctx.mapper.update("users", AdminPatch(admin=True), NameFilter(name=name))
        return ctx.mapper.select(UserName, "users", "name = ?", name)[0].uid

    return _make_user


def login(client: TestClient, name: str, password: str = "password"):
    client.cookies.clear()
    return client.post("/api/login", json={"user": name, "password": password})


@pytest.fixture
def admin_client(client, make_user):
    make_user("admin", "admin-password", admin=True)
    response = login(client, "admin", "admin-password")
    assert response.status_code == 200
    return client
