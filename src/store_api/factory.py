"""Выбор хранилища по окружению."""

from __future__ import annotations

import logging
import os

from database import SQLiteStore
from database.store import OrderStore

from .api_client import ENV_VAR_URL, SupabaseStore

logger = logging.getLogger(__name__)


async def create_store_from_env() -> OrderStore:
    """Supabase, если задан SUPABASE_URL, иначе локальная SQLite."""
    if os.getenv(ENV_VAR_URL):
        return SupabaseStore.from_env()

    store = SQLiteStore()
    await store.init_db()
    logger.info("SUPABASE_URL не задан, используется локальная база %s", store.path)
    return store
