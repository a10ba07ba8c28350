"""
Supabase client initialization.

This module contains *only* the database connection setup and exposes
`get_supabase()`, which returns the shared client for repository modules.
The client is created on first use so pure code paths never need credentials.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from .env file
# Look for .env in the sales-crm directory
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_client: Optional[Client] = None


def get_supabase() -> Client:
    """Return the shared Supabase client, creating it from the environment on first call."""

    global _client
    if _client is not None:
        return _client

    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_key: str | None = os.getenv("SUPABASE_KEY")

    if not supabase_url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )

    if not supabase_key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )

    _client = create_client(supabase_url, supabase_key)
    return _client


__all__ = ["get_supabase"]
