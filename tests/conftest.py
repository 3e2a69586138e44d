# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_MIGRATE", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from plikeme.core.security import create_access_token, hash_password
from plikeme.db.session import Base, enable_sqlite_pragmas
from plikeme.db.session import get_db as app_get_session
from plikeme.main import app as fastapi_app
from plikeme.models import Community, User

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "Passw0rd!"

_PASSWORD_HASH = hash_password(TEST_PASSWORD)
_USERNAME_COUNTER = count(1)

CANCER_DIMENSIONS = {
    "stage": {"label": "分期", "values": ["I期", "II期", "III期"]},
    "type": {"label": "分型", "values": ["三阴性", "HER2阳性"]},
}


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_pragmas)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test wipes the tables afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with the shared test password."""

    def _make_user(username: str | None = None, **fields) -> User:
        user = User(
            username=username or f"user{next(_USERNAME_COUNTER)}",
            password_hash=_PASSWORD_HASH,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second test user."""
    return make_user("bob")


def headers_for(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return headers_for(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return headers_for(other_user)


@pytest.fixture()
def community(db_session: Session) -> Community:
    """A community that declares no sub-community dimensions."""
    community = Community(
        name="糖尿病",
        description="分享血糖管理经验",
        keywords="糖尿病 血糖 胰岛素",
        member_count=0,
    )
    db_session.add(community)
    db_session.commit()
    db_session.refresh(community)
    return community


@pytest.fixture()
def cancer_community(db_session: Session) -> Community:
    """A community with stage and type dimensions."""
    community = Community(
        name="乳腺癌",
        description="抗癌路上，我们同行",
        keywords="乳腺癌 乳腺 癌症 肿瘤 化疗",
        member_count=0,
        dimensions=CANCER_DIMENSIONS,
    )
    db_session.add(community)
    db_session.commit()
    db_session.refresh(community)
    return community


@pytest.fixture()
def auth_headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for any user."""
    return headers_for
