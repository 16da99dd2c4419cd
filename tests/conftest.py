"""
tests/conftest.py -- Shared test fixtures for ItemKeeper tests.

This module provides:
  - engine / user_store / item_store: an isolated in-memory database per test
  - make_account / token_for: factories for accounts and valid session tokens
  - client: TestClient over the full ASGI app (API + web) with a patched
    lifespan that wires the test stores into app.state
  - use_session: put exactly one session cookie (or none) in the client jar

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
Each test gets a fresh name, so no state leaks between tests.

Environment must be set before any auth/core import:
  DEBUG=true        -> get_settings() auto-generates SECRET_KEY
  ARGON2_*          -> cheapest legal Argon2 work factor so hashing is fast
  ALLOWED_HOSTS     -> adds "testserver", the Host header TestClient sends
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: set before importing anything that calls get_settings().
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "8")
os.environ.setdefault("ARGON2_PARALLELISM", "1")
os.environ.setdefault("ALLOWED_HOSTS", '["localhost", "127.0.0.1", "testserver"]')

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from asgi import app
from auth.models import Account
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import create_session_token, new_session_claim
from core.config import get_settings
from core.database import create_db_engine
from items.store import ItemStore

# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    url = f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = create_db_engine(url)
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def item_store(engine: Engine) -> ItemStore:
    return ItemStore(engine)


@pytest.fixture
def make_account(user_store: UserStore) -> Callable[..., Account]:
    """Factory: create an account with a real (cheap) Argon2 hash."""

    def _make(username: str, password: str = "password123") -> Account:
        return user_store.create_account(username, f"{username}@example.com", hash_password(password))

    return _make


@pytest.fixture
def token_for() -> Callable[[Account], str]:
    """Factory: a valid session token for an account, signed with the app secret."""

    def _token(account: Account) -> str:
        claim = new_session_claim(account.id, account.username, get_settings().session_lifetime_seconds)
        return create_session_token(claim, get_settings().secret_key)

    return _token


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine, user_store: UserStore, item_store: ItemStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see the
    isolated test DB rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.item_store = item_store
        yield

    return test_lifespan


@pytest.fixture
def client(engine: Engine, user_store: UserStore, item_store: ItemStore) -> Generator[TestClient, None, None]:
    """TestClient over the real app with follow_redirects=False.

    Redirect tests assert on Location headers, which are invisible once the
    client follows the redirect and returns the final response.
    """
    app.router.lifespan_context = _patch_lifespan(engine, user_store, item_store)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as test_client:
        yield test_client


@pytest.fixture
def use_session(client: TestClient) -> Callable[[str | None], None]:
    """Replace whatever is in the client's cookie jar with a single session cookie (or none)."""

    def _use(token: str | None) -> None:
        client.cookies.clear()
        if token is not None:
            client.cookies.set("token", token)

    return _use
