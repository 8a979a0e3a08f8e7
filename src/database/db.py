"""Работа с локальной базой данных SQLite (разработка и тесты)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from .models import Order, OrderItem, OrderStatus, Product
from .store import StoreError


DB_PATH = Path(__file__).resolve().parents[2] / "data" / "shop.db"

PRODUCT_COLUMNS = "id, name, price, image_url, description, category, is_active"
ORDER_UPDATE_COLUMNS = frozenset({"phone", "address", "status"})


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStore:
    """Хранилище каталога и заказов поверх aiosqlite.

    Повторяет поведение Supabase: заказ и его позиция пишутся двумя
    отдельными запросами, без общей транзакции.
    """

    def __init__(self, path: Union[str, Path] = DB_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def init_db(self) -> None:
        """Инициализировать базу данных."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self._path) as db:
            # Таблица товаров
            await db.execute("""
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    price REAL NOT NULL,
                    image_url TEXT,
                    description TEXT,
                    category TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1
                )
            """)

            # Таблица заказов
            await db.execute("""
                CREATE TABLE IF NOT EXISTS orders (
                    id TEXT PRIMARY KEY,
                    telegram_user_id TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'new',
                    phone TEXT,
                    address TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            # Позиции заказов
            await db.execute("""
                CREATE TABLE IF NOT EXISTS order_items (
                    order_id TEXT NOT NULL,
                    product_id TEXT NOT NULL,
                    qty INTEGER NOT NULL DEFAULT 1,
                    price REAL NOT NULL,
                    FOREIGN KEY (order_id) REFERENCES orders(id),
                    FOREIGN KEY (product_id) REFERENCES products(id)
                )
            """)

            await db.commit()

    async def add_product(self, product: Product) -> Product:
        """Добавить или заменить товар в каталоге."""
        try:
            async with aiosqlite.connect(self._path) as db:
                await db.execute(
                    f"INSERT OR REPLACE INTO products ({PRODUCT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        product.id,
                        product.name,
                        product.price,
                        product.image_url,
                        product.description,
                        product.category,
                        1 if product.is_active else 0,
                    ),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось сохранить товар {product.id}: {exc}") from exc
        return product

    async def list_active_products(self, category: str) -> list[Product]:
        """Активные товары категории, по имени."""
        try:
            async with aiosqlite.connect(self._path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    f"SELECT {PRODUCT_COLUMNS} FROM products "
                    "WHERE is_active = 1 AND category = ? ORDER BY name ASC",
                    (category,),
                ) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось загрузить товары категории {category!r}: {exc}") from exc
        return [Product.from_dict(dict(row)) for row in rows]

    async def get_active_product(self, product_id: str) -> Optional[Product]:
        try:
            async with aiosqlite.connect(self._path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = ? AND is_active = 1",
                    (product_id,),
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось загрузить товар {product_id}: {exc}") from exc
        if not row:
            return None
        return Product.from_dict(dict(row))

    async def create_order(self, telegram_user_id: str, product: Product) -> Order:
        """Создать заказ со статусом new и одной позицией (qty 1, цена товара сейчас)."""
        order = Order(
            id=str(uuid.uuid4()),
            telegram_user_id=telegram_user_id,
            status=OrderStatus.NEW.value,
            created_at=_utcnow(),
        )
        try:
            async with aiosqlite.connect(self._path) as db:
                await db.execute(
                    "INSERT INTO orders (id, telegram_user_id, status, created_at) VALUES (?, ?, ?, ?)",
                    (order.id, order.telegram_user_id, order.status, order.created_at),
                )
                await db.commit()

                # Отдельная запись: при ошибке заказ остаётся без позиции
                await db.execute(
                    "INSERT INTO order_items (order_id, product_id, qty, price) VALUES (?, ?, ?, ?)",
                    (order.id, product.id, 1, product.price),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось создать заказ: {exc}") from exc
        return order

    async def get_latest_order(self, telegram_user_id: str) -> Optional[Order]:
        """Последний заказ пользователя по created_at."""
        try:
            async with aiosqlite.connect(self._path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT * FROM orders WHERE telegram_user_id = ? "
                    "ORDER BY created_at DESC, rowid DESC LIMIT 1",
                    (telegram_user_id,),
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось найти заказ пользователя {telegram_user_id}: {exc}") from exc
        if not row:
            return None
        return Order.from_dict(dict(row))

    async def update_order(self, order_id: str, **fields) -> None:
        unknown = set(fields) - ORDER_UPDATE_COLUMNS
        if unknown:
            raise ValueError(f"Нельзя обновить колонки заказа: {', '.join(sorted(unknown))}")
        if not fields:
            return

        assignments = ", ".join(f"{column} = ?" for column in fields)
        values = [v.value if isinstance(v, OrderStatus) else v for v in fields.values()]
        try:
            async with aiosqlite.connect(self._path) as db:
                await db.execute(
                    f"UPDATE orders SET {assignments} WHERE id = ?",
                    (*values, order_id),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось обновить заказ {order_id}: {exc}") from exc

    async def list_order_items(self, order_id: str) -> list[OrderItem]:
        try:
            async with aiosqlite.connect(self._path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT order_id, product_id, qty, price FROM order_items WHERE order_id = ?",
                    (order_id,),
                ) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"Не удалось загрузить позиции заказа {order_id}: {exc}") from exc
        return [OrderItem.from_dict(dict(row)) for row in rows]

    async def close(self) -> None:
        # Соединения открываются на каждый запрос
        return None
