"""Корзина витрины."""

from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, StorageError
from .store import STORAGE_KEY, CartItem, CartKey, CartStore

__all__ = [
    "STORAGE_KEY",
    "CartItem",
    "CartKey",
    "CartStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StorageError",
]
