"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so settings never read
a developer's .env file and the module-level engine points at an in-memory
database. Each test gets its own SQLite database seeded with three users,
their sessions and two posts.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter
from app.core import rate_limit as rate_limit_module
from app.core.app_factory import create_app
from app.db.session import build_engine, get_db, init_db
from app.models import AuthSession, Post, User

FIXED_NOW = 1_000_000.0


@pytest.fixture(autouse=True)
def _deterministic_rate_limiters(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh limiters per test, all reading a frozen clock."""
    rate_limit_module.reset_rate_limiters()
    monkeypatch.setattr(
        rate_limit_module,
        "InMemorySlidingWindowRateLimiter",
        partial(InMemorySlidingWindowRateLimiter, clock=lambda: FIXED_NOW),
    )
    yield
    rate_limit_module.reset_rate_limiters()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def seed(session_factory) -> dict[str, str]:
    """Seed users u1..u3 with live sessions, plus posts p1 (owned by u2) and p2 (owned by u1)."""
    expires = datetime.now(timezone.utc) + timedelta(days=1)
    with session_factory() as db, db.begin():
        for user_id, username in (("u1", "alice"), ("u2", "bob"), ("u3", "carol")):
            db.add(User(id=user_id, username=username, display_name=username.title()))
            db.add(AuthSession(id=f"token-{user_id}", user_id=user_id, expires_at=expires))
        db.flush()
        db.add(Post(id="p1", user_id="u2", content="bob's post"))
        db.add(Post(id="p2", user_id="u1", content="alice's post"))
    return {"alice": "u1", "bob": "u2", "carol": "u3"}


@pytest.fixture
def count_rows(session_factory) -> Callable[..., int]:
    """Count rows of a model matching simple equality filters."""

    def _count(model, **filters) -> int:
        with session_factory() as db:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return int(db.scalar(stmt) or 0)

    return _count


@pytest.fixture
def app(session_factory, seed) -> FastAPI:
    application = create_app()

    def _get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = _get_db
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build Authorization headers for a seeded user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer token-{user_id}"}

    return _headers
