"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock, patch
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("LLM_PROVIDER", "anthropic")
os.environ.setdefault("LLM_MODEL", "claude-sonnet-4-20250514")
os.environ.setdefault("USE_LLM_DESCRIPTION", "false")

from b2y.models.session import Session
from tests.fixtures.listings import SEED_LISTINGS
from tests.utils.fake_supabase import FakeRealtimeClient, FakeSupabase


@pytest.fixture
def fake_supabase():
    """In-memory Supabase client wired into every service."""
    client = FakeSupabase()
    with patch('b2y.services.supabase_client.get_supabase_client', return_value=client):
        yield client


@pytest.fixture
def seeded_supabase(fake_supabase):
    """Fake client preloaded with the sample listings."""
    fake_supabase.seed("listings", SEED_LISTINGS)
    return fake_supabase


@pytest.fixture
def fake_realtime():
    return FakeRealtimeClient()


@pytest.fixture
def mock_supabase_client():
    """MagicMock client for tests that script store responses by hand."""
    client = MagicMock()
    with patch('b2y.services.supabase_client.get_supabase_client', return_value=client):
        yield client


@pytest.fixture
def owner_session():
    return Session(user_id="user_owner_b", email="owner@example.com", access_token="owner-token")


@pytest.fixture
def buyer_session():
    return Session(user_id="user_buyer_a", email="buyer@example.com", access_token="buyer-token")


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture(scope="function")
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
