"""
tests/conftest.py -- Shared test fixtures for OrderDesk tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for auth + sales
  - _patch_lifespan(): wires test stores and services into app.state, bypassing real startup
  - user_store / sales_store / issuer: unit-test fixtures (fresh per test)
  - api_client: TestClient plus a registered user's JWT for API integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The DEBUG env var must be set before any api/ import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from sales.service import ClientService, OrderService
from sales.store import SalesStore

TEST_SECRET_KEY = "orderdesk-test-signing-key-" + "0123456789abcdef" * 3

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, SalesStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    auth_url = f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true"
    sales_url = f"sqlite:///file:test_sales_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(auth_url), SalesStore(sales_url)


def _patch_lifespan(user_store: UserStore, sales_store: SalesStore, issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores and a fixed-key TokenIssuer into app.state
    so TestClient routes see isolated test DBs rather than the on-disk ones.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.token_issuer = issuer
        app.state.user_store = user_store
        app.state.sales_store = sales_store
        app.state.auth_service = AuthService(user_store, issuer)
        app.state.client_service = ClientService(sales_store)
        app.state.order_service = OrderService(sales_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit fixtures -- fresh in-memory stores per test
# ---------------------------------------------------------------------------


@pytest.fixture
def signing_key() -> str:
    return TEST_SECRET_KEY


@pytest.fixture
def issuer(signing_key: str) -> TokenIssuer:
    return TokenIssuer(signing_key)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def sales_store() -> Generator[SalesStore, None, None]:
    store = SalesStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def auth_service(user_store: UserStore, issuer: TokenIssuer) -> AuthService:
    return AuthService(user_store, issuer)


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use isolated in-memory stores. A user
    (testuser / test@orderdesk.test / testpass123) is registered before the
    client starts and its JWT is returned for Authorization headers.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, sales_store = _make_test_stores(suffix)
    issuer = TokenIssuer(TEST_SECRET_KEY)

    registered = AuthService(user_store, issuer).register("testuser", "test@orderdesk.test", "testpass123")
    uid = user_store.get_by_email("test@orderdesk.test").id

    app.router.lifespan_context = _patch_lifespan(user_store, sales_store, issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, registered.token, uid

    user_store.close()
    sales_store.close()
