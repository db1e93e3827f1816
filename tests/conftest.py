"""
tests/conftest.py -- Shared fixtures.

The FastAPI app is exercised through TestClient with the Supabase-backed
dependencies swapped for the in-memory fakes in tests/fakes.py. The real
AccountRepository runs on top of FakeSupabase, so lookups, lockout writes and
unique constraints go through production code.
"""

from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from civic_auth.config import settings
from civic_auth.core import dependencies
from civic_auth.core.rate_limit import limiter
from civic_auth.main import app
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, Role

from tests.fakes import FakeAuthProvider, FakeClock, FakeFayda, FakeSupabase

limiter.enabled = False

DEFAULT_PASSWORD = "correct-horse-1"


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def accounts(supabase) -> AccountRepository:
    return AccountRepository(supabase, settings.accounts_table)


@pytest.fixture
def fayda() -> FakeFayda:
    return FakeFayda()


@pytest.fixture
def provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(accounts, fayda, provider, clock):
    app.dependency_overrides[dependencies.get_account_repository] = lambda: accounts
    app.dependency_overrides[dependencies.get_fayda_client] = lambda: fayda
    app.dependency_overrides[dependencies.get_auth_provider] = lambda: provider
    app.dependency_overrides[dependencies.get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(accounts, provider):
    """Create a managed-auth user plus its account row."""

    def _make(
        email: str = "citizen@example.com",
        password: str = DEFAULT_PASSWORD,
        role: Role = Role.CITIZEN,
        fin: Optional[str] = None,
        phone_number: Optional[str] = None,
        **fields,
    ) -> Account:
        user = provider.create_user(email, password)
        return accounts.create({
            "id": user.id,
            "email": email,
            "fin": fin,
            "phone_number": phone_number,
            "full_name": fields.pop("full_name", "Test User"),
            "role": role,
            "email_verified": True,
            **fields,
        })

    return _make


@pytest.fixture
def admin_token(make_account, provider):
    """Return (account, access token) for a signed-in admin."""

    def _login(role: Role = Role.ADMIN, email: str = "admin@example.com"):
        account = make_account(email=email, role=role)
        _, session = provider.authenticate(email, DEFAULT_PASSWORD)
        return account, session.access_token

    return _login
