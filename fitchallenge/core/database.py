"""
Database Configuration

Supabase client for REST API access (already pooled via PostgREST).

The client is created on first use so that modules importing this one
(tests, the health check) do not need credentials at import time.
"""

from typing import Optional

from supabase import create_client, Client
from fitchallenge.core.config import settings


_supabase: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client instance.

    Raises:
        RuntimeError: if SUPABASE_URL / SUPABASE_SERVICE_KEY are not set
    """
    global _supabase

    if _supabase is None:
        if not settings.supabase_configured:
            raise RuntimeError(
                "Supabase is not configured (SUPABASE_URL and SUPABASE_SERVICE_KEY)"
            )
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)

    return _supabase
