"""
Supabase client initialization.

This module contains only the database connection setup and the shared query
runner. The client is created on demand by `create_supabase_client()` and
handed to the repository classes explicitly; nothing connects at import time.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Mapping, Optional

from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import Client, create_client  # type: ignore[import-not-found]

from domain.errors import PersistenceError

# Look for .env in the project root
_ENV_PATH = Path(__file__).parent.parent / ".env"


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """
    Create a Supabase client from explicit credentials or the environment.

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_KEY cannot be resolved
    """
    load_dotenv(dotenv_path=_ENV_PATH)

    # Read credentials from the environment to avoid hard-coding secrets in code.
    supabase_url = url or os.getenv("SUPABASE_URL")
    supabase_key = key or os.getenv("SUPABASE_KEY")

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

    return create_client(supabase_url, supabase_key)


def execute_query(query: Any, action: str) -> List[Mapping[str, Any]]:
    """
    Run a PostgREST query builder and return its rows.

    Failures surface as PersistenceError: APIError from PostgREST, transport
    errors from the HTTP layer, and responses that carry an `error`.
    """

    try:
        response = query.execute()
    except APIError as e:
        raise PersistenceError(f"Failed to {action}: {e.message}") from e
    except Exception as e:
        raise PersistenceError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise PersistenceError(f"Failed to {action}: {error}")

    return getattr(response, "data", None) or []


__all__ = ["create_supabase_client", "execute_query"]
