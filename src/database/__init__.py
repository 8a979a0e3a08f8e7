"""Модуль работы с каталогом и заказами."""

from .db import DB_PATH, SQLiteStore
from .models import CATEGORIES, Order, OrderItem, OrderStatus, Product
from .store import OrderStore, StoreError

__all__ = [
    "CATEGORIES",
    "DB_PATH",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStore",
    "Product",
    "SQLiteStore",
    "StoreError",
]
