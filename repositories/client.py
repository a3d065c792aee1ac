"""
Supabase client initialization.

This module contains *only* the database connection setup and exposes
`get_supabase()` for the repository modules. The client is created on first
use so that importing a repository never requires credentials.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase service-role key (server-side only; the
  pipeline performs its own authorization checks before every store access)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from the project-root .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# PostgreSQL error code for unique_violation, surfaced by PostgREST.
UNIQUE_VIOLATION = "23505"

_client: Optional[Client] = None


def get_supabase() -> Client:
    """
    Return the shared Supabase client, creating it on first call.

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_KEY is not configured
    """
    global _client

    if _client is None:
        supabase_url = os.getenv("SUPABASE_URL")
        supabase_key = os.getenv("SUPABASE_KEY")

        if not supabase_url:
            raise RuntimeError(
                "Missing environment variable: SUPABASE_URL. "
                "Set SUPABASE_URL to your Supabase project URL."
            )

        if not supabase_key:
            raise RuntimeError(
                "Missing environment variable: SUPABASE_KEY. "
                "Set SUPABASE_KEY to your Supabase service-role key."
            )

        _client = create_client(supabase_url, supabase_key)

    return _client


def use_client(client: Optional[Client]) -> None:
    """
    Replace the shared client (tests, scripts against another project).

    Passing None drops the current client so the next call to
    get_supabase() builds a new one from the environment.
    """
    global _client
    _client = client


def is_unique_violation(error: Exception) -> bool:
    """True if a PostgREST error was caused by a unique constraint."""
    return getattr(error, "code", None) == UNIQUE_VIOLATION


__all__ = ["get_supabase", "use_client", "is_unique_violation", "UNIQUE_VIOLATION"]
