"""Общий интерфейс хранилища товаров и заказов."""

from __future__ import annotations

from typing import Optional, Protocol

from .models import Order, OrderItem, Product


class StoreError(Exception):
    """Ошибка чтения или записи во внешнее хранилище."""


class OrderStore(Protocol):
    """Хранилище каталога и заказов: Supabase в проде, SQLite локально."""

    async def list_active_products(self, category: str) -> list[Product]: ...

    async def get_active_product(self, product_id: str) -> Optional[Product]: ...

    async def create_order(self, telegram_user_id: str, product: Product) -> Order: ...

    async def get_latest_order(self, telegram_user_id: str) -> Optional[Order]: ...

    async def update_order(self, order_id: str, **fields) -> None: ...

    async def list_order_items(self, order_id: str) -> list[OrderItem]: ...

    async def close(self) -> None: ...
