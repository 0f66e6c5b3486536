# qrmenu/core/supabase_client.py
from supabase import create_client, Client
import logging
from typing import Optional

from .config import Settings

logger = logging.getLogger(__name__)

# Don't initialize at module level
_supabase_client: Optional[Client] = None


def get_supabase_client(settings: Settings) -> Client:
    """Get or create the process-wide Supabase client"""
    global _supabase_client

    if _supabase_client is None:
        if not settings.supabase_url or not settings.supabase_key:
            logger.error("Supabase credentials not found in environment variables")
            raise ValueError("Supabase credentials not configured")

        try:
            _supabase_client = create_client(settings.supabase_url, settings.supabase_key)
            logger.info("Successfully initialized Supabase client")
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise

    return _supabase_client


__all__ = ["get_supabase_client"]
