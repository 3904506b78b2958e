import logging
import time
from typing import Any, Dict, Optional
from supabase import create_client, Client
from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            logger.info(f"Creating Supabase client for {settings.supabase_url}")
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Used by the backfill script."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def call_rpc(supabase: Client, function_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Run a database function and return its data. Errors propagate to the caller."""
    started = time.monotonic()
    try:
        result = supabase.rpc(function_name, params or {}).execute()
    except Exception as e:
        logger.error(f"DB ERROR - rpc {function_name}: {e}")
        raise
    logger.debug(f"DB SUCCESS - rpc {function_name} in {(time.monotonic() - started) * 1000:.0f}ms")
    return result.data


def ping(supabase: Client) -> bool:
    """Cheap reachability probe for the readiness endpoint"""
    try:
        supabase.table("groups").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.warning(f"Supabase readiness check failed: {e}")
        return False
