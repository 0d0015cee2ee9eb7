# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EVENT_BACKEND", "memory")

from linkup.api.v1.dependencies import get_delivery_hub, get_event_trigger
from linkup.core.security import create_access_token
from linkup.db.session import Base, create_tables
from linkup.db.session import get_db as app_get_session
from linkup.main import app as fastapi_app
from linkup.models import User
from linkup.services.events import InMemoryEventTrigger
from linkup.services.realtime import DeliveryHub

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
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

        # Services commit, so each test wipes the tables it touched.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def hub() -> Iterator[DeliveryHub]:
    """A started hub with a short heartbeat and a small queue."""
    delivery_hub = DeliveryHub(queue_size=8, heartbeat_seconds=0.05)
    delivery_hub.start()
    try:
        yield delivery_hub
    finally:
        delivery_hub.stop()


@pytest.fixture()
def trigger() -> InMemoryEventTrigger:
    return InMemoryEventTrigger()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    hub: DeliveryHub,
    trigger: InMemoryEventTrigger,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_delivery_hub] = lambda: hub
    app.dependency_overrides[get_event_trigger] = lambda: trigger
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique handles."""

    def _make_user(user_id: str | None = None, **fields: str) -> User:
        n = next(_USER_COUNTER)
        user = User(
            user_id=user_id or f"user-{n}",
            handle=fields.pop("handle", f"handle_{n}"),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", handle="alice", display_name="Alice Liddell", location="Oxford")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", handle="bob", display_name="Bob Builder", bio="I fix things")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol", handle="carol", display_name="Carol Danvers")


def _bearer_headers(user_id: str, **claims: str) -> dict[str, str]:
    token = create_access_token(user_id, claims or None)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Return a factory building bearer headers for any user id and claims."""
    return _bearer_headers


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return _bearer_headers(alice.user_id)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return _bearer_headers(bob.user_id)


@pytest.fixture()
def carol_headers(carol: User) -> dict[str, str]:
    return _bearer_headers(carol.user_id)
