"""Пакет интеграции с REST API Supabase."""

from .api_client import SupabaseAPIError, SupabaseStore
from .factory import create_store_from_env

__all__ = [
    "SupabaseAPIError",
    "SupabaseStore",
    "create_store_from_env",
]
