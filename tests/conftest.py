# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("THROTTLE_BACKEND", "memory")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fittrack_auth.api.v1.dependencies import get_login_throttle_dep
from fittrack_auth.core.clock import ManualClock
from fittrack_auth.db.session import Base
from fittrack_auth.db.session import get_db as app_get_session
from fittrack_auth.main import app as fastapi_app
from fittrack_auth.models import User
from fittrack_auth.services import user_service
from fittrack_auth.services.login_throttle import LoginThrottle
from fittrack_auth.services.throttle_store import InMemoryThrottleStore

TEST_DB_URL = "sqlite://"
TEST_USER_AGENT = "pytest-agent/1.0"
TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture(scope="session")
def engine() -> Iterator[Engine]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
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
        session.close()
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000.0)


@pytest.fixture()
def store(clock: ManualClock) -> InMemoryThrottleStore:
    return InMemoryThrottleStore(clock)


@pytest.fixture()
def throttle(store: InMemoryThrottleStore, clock: ManualClock) -> LoginThrottle:
    return LoginThrottle(store, clock)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    throttle: LoginThrottle,
) -> Iterator[None]:
    def _get_session_override() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_login_throttle_dep] = lambda: throttle
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_login_throttle_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(
        app,
        base_url="http://testserver",
        headers={"User-Agent": TEST_USER_AGENT},
    ) as test_client:
        yield test_client


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return an active account."""
    return user_service.create_user(
        db_session,
        "alice",
        TEST_PASSWORD,
        email="alice@example.com",
    )


@pytest.fixture()
def inactive_user(db_session: Session) -> User:
    """Create and return a disabled account."""
    return user_service.create_user(db_session, "bob", TEST_PASSWORD, is_active=False)

