# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from core.config import settings
from main import create_app
from tests.fake_supabase import FakeSupabase


# Every module that binds get_supabase_client at import time
SUPABASE_CONSUMERS = [
    "core.supabase_client",
    "dependencies.auth",
    "core.remote_auth",
    "core.facility_roles",
    "core.conditional_permissions",
    "routers.admin",
    "routers.facilities",
    "routers.products",
]


@pytest.fixture
def fake_supabase(monkeypatch) -> FakeSupabase:
    """Route every Supabase call to one in-memory fake."""
    fake = FakeSupabase()
    for module in SUPABASE_CONSUMERS:
        monkeypatch.setattr(f"{module}.get_supabase_client", lambda: fake)
    return fake


@pytest.fixture(autouse=True)
def fast_rpc_settings(monkeypatch):
    """Short timeouts and no backoff sleeps."""
    monkeypatch.setattr(settings, "RPC_TIMEOUT_SECONDS", 1.0)
    monkeypatch.setattr(settings, "RPC_MAX_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "RPC_RETRY_BACKOFF_SECONDS", 0)
    monkeypatch.setattr(settings, "AUDIT_LOG_MAX_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "ROLE_GUARD_MODE", "enforcing")


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app, fake_supabase) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def users(fake_supabase):
    """
    One user per interesting role. Returns token -> auth header.
    """
    fake_supabase.add_user("tok-national", "nat-1", "national")
    fake_supabase.add_user("tok-zonal", "zon-1", "zonal")
    fake_supabase.add_user("tok-manager", "mgr-1", "facility_manager", facility_id="fac-1")
    fake_supabase.add_user("tok-officer", "off-1", "facility_officer", facility_id="fac-1")
    fake_supabase.add_user("tok-viewer", "view-1", "viewer")
    fake_supabase.add_user("tok-legacy", "legacy-1", "admin")
    fake_supabase.add_user("tok-bogus", "bogus-1", "superuser")

    def header(token):
        return {"Authorization": f"Bearer {token}"}

    return header


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache before each test."""
    from core.cache import cache_clear
    cache_clear()
    yield
    cache_clear()
