from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from travelai.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def build_supabase_client(settings: Settings) -> Optional[Client]:
    """
    Create a Supabase client when credentials are provided.
    Returns None when Supabase is not configured so the app can fall back to the
    in-memory backends.
    """
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    if not (settings.use_supabase and settings.supabase_url and key):
        logger.info("Supabase not enabled or credentials missing; using in-memory backends.")
        return None

    client = create_client(settings.supabase_url, key)
    logger.info("Supabase client initialized.")
    return client


@lru_cache
def get_supabase_client() -> Optional[Client]:
    return build_supabase_client(get_settings())
