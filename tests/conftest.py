# tests/conftest.py
from __future__ import annotations

import os
import random
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from community_forum.core.security import create_moderator_token
from community_forum.db.session import Base, configure_sqlite
from community_forum.db.session import get_db as app_get_session
from community_forum.main import app as fastapi_app
from community_forum.models import Comment, Post
from community_forum.services.engagement import EngagementTracker
from community_forum.services.moderation import ModerationService
from community_forum.services.thread_store import ThreadStore

TEST_DB_URL = "sqlite://"
MAX_DEPTH = 3


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits become savepoints inside a rolled-back transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
        expire_on_commit=False,
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


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
def store(db_session: Session) -> ThreadStore:
    """Thread store with a seeded random source and the default depth limit."""
    return ThreadStore(db_session, max_depth=MAX_DEPTH, rng=random.Random(1234))


@pytest.fixture()
def tracker(db_session: Session) -> EngagementTracker:
    return EngagementTracker(db_session)


@pytest.fixture()
def moderation(db_session: Session) -> ModerationService:
    return ModerationService(db_session)


@pytest.fixture()
def test_post(store: ThreadStore) -> Post:
    """Create a baseline visible post."""
    return store.create_post("First post", "Hello everyone", "free", nickname="writer")


@pytest.fixture()
def other_post(store: ThreadStore) -> Post:
    """Create a second post for isolation checks."""
    return store.create_post("Second post", "Another body", "question", nickname="asker")


@pytest.fixture()
def test_comment(store: ThreadStore, test_post: Post) -> Comment:
    """Create a top-level comment protected by the password ``s1``."""
    return store.create_comment(test_post.id, "n1", "s1", "hello")


@pytest.fixture()
def moderator_headers() -> dict[str, str]:
    """Return authorization headers for a moderator."""
    token = create_moderator_token("moderator@example.com")
    return {"Authorization": f"Bearer {token}"}
