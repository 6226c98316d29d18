"""
tests/conftest.py -- Shared test fixtures for VaultKeep.

This module provides:
  - store: a fresh in-memory VaultStore per test (plain :memory:, single thread)
  - users: three seeded users (alice, bob, carol) with placeholder hashes
  - _make_test_store() / _patch_lifespan(): wire an isolated store into app.state
  - api_client: TestClient plus a registered user's JWT for API integration tests
  - second_user: another registered user in the api_client store

Design: API tests use named shared-memory SQLite URIs (not plain :memory:)
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from types import SimpleNamespace

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.accounts import create_user
from auth.tokens import create_access_token
from vault.models import User
from vault.store import VaultStore

API_PASSWORD = "correct-horse-battery"

# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> Generator[VaultStore, None, None]:
    """Yield an empty in-memory store. Each test gets its own database."""
    s = VaultStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture()
def users(store: VaultStore) -> SimpleNamespace:
    """Seed alice, bob and carol directly through the store.

    The password hash is a placeholder: these users never log in, and skipping
    bcrypt keeps the service tests fast. Use auth.accounts.create_user() when a
    test needs a real login or a default vault.
    """
    seeded = {}
    for first in ("alice", "bob", "carol"):
        user_id = store.create_user(
            User(
                email=f"{first}@example.com",
                password_hash="not-a-real-hash",
                first_name=first.capitalize(),
                last_name="Tester",
            )
        )
        seeded[first] = store.get_user(user_id)
    return SimpleNamespace(**seeded)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> VaultStore:
    """Create an isolated named shared-memory store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules do
                   not share state (the requesting module's name).
    """
    return VaultStore(db_url=f"sqlite:///file:test_vaultkeep_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: VaultStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so TestClient routes see
    the isolated test DB rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The user is registered through auth.accounts.create_user() with password
    API_PASSWORD, so they own a default vault and can log in. The JWT is for
    Authorization headers. Rate-limit counters are reset so login and register
    limits apply per module, not per session.
    """
    store = _make_test_store(request.module.__name__.replace(".", "_"))
    owner = create_user(store, "owner@example.com", API_PASSWORD, "Olivia", "Owner")
    token = create_access_token(user_id=owner.id, email=owner.email, expire_seconds=3600)

    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, owner.id

    store.close()


@pytest.fixture(scope="module")
def second_user(api_client: tuple[TestClient, str, int]) -> tuple[str, int]:
    """Register a second user in the api_client store and return (token, user_id)."""
    client, _token, _uid = api_client
    other = create_user(client.app.state.store, "second@example.com", API_PASSWORD, "Sam", "Second")
    return create_access_token(user_id=other.id, email=other.email, expire_seconds=3600), other.id
