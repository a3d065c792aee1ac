"""
Pytest configuration.

Adds the project root to the Python path so that tests can import the
domain, repositories, services and api packages, and provides an in-memory
Supabase client for repository and service tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fake_supabase import FakeSupabase  # noqa: E402
from repositories.client import use_client  # noqa: E402


@pytest.fixture
def fake_db():
    """Install an empty in-memory store for the duration of one test."""
    db = FakeSupabase()
    use_client(db)  # type: ignore[arg-type]
    yield db
    use_client(None)
