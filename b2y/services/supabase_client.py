"""Supabase client wrapper with async context manager support."""

from typing import Optional
from supabase import create_client, acreate_client, Client, AsyncClient
from supabase.client import ClientOptions, AsyncClientOptions
from b2y.utils.config import AppConfig
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Singletons, one per serverless instance
_client: Optional[Client] = None
_realtime_client: Optional[AsyncClient] = None


def _credentials(key: Optional[str]) -> tuple[str, str]:
    url = AppConfig.supabase_url()
    if not url or not key:
        raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return url, key


def get_supabase_client() -> Client:
    """Get or create the service-role Supabase client."""
    global _client

    if _client is None:
        url, key = _credentials(AppConfig.supabase_service_key())
        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )
        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)

    return _client


def create_auth_client() -> Client:
    """Create a fresh client for end-user auth flows.

    Each session gets its own client so one user's sign-in never leaks
    into another request.
    """
    url, key = _credentials(AppConfig.supabase_anon_key())
    options = ClientOptions(
        auto_refresh_token=True,
        persist_session=False,
    )
    return create_client(url, key, options)


async def get_realtime_client() -> AsyncClient:
    """Get or create the async client used for Realtime channels."""
    global _realtime_client

    if _realtime_client is None:
        url, key = _credentials(AppConfig.supabase_anon_key())
        options = AsyncClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )
        _realtime_client = await acreate_client(url, key, options)
        logger.info("Supabase realtime client initialized", url=url)

    return _realtime_client


async def close_supabase_client() -> None:
    """Drop client references so the next call reconnects."""
    global _client, _realtime_client
    _client = None
    _realtime_client = None
    logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for the Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=str(exc_val),
                type=exc_type.__name__
            )
        return False


def first_row(result) -> Optional[dict]:
    """First row of a PostgREST response, or None."""
    return result.data[0] if result.data and len(result.data) > 0 else None
