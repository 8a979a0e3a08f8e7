"""Модели магазина: товары и заказы."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Статус заказа из Telegram-бота."""

    NEW = "new"
    CONFIRMED = "confirmed"  # телефон получен, ждём адрес


# Категории каталога в боте (значения колонки products.category)
CATEGORIES: dict[str, str] = {
    "coffee": "☕ Coffee",
    "accessories": "🎁 Accessories",
    "other": "🧁 Other",
}


@dataclass
class Product:
    """Модель товара."""

    id: str
    name: str
    price: float
    image_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            price=float(data["price"]),
            image_url=data.get("image_url"),
            description=data.get("description"),
            category=data.get("category"),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class Order:
    """Модель заказа."""

    id: str
    telegram_user_id: str
    status: str = OrderStatus.NEW.value
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None  # ISO-8601, ключ сортировки «последнего заказа»

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        return cls(
            id=str(data["id"]),
            telegram_user_id=str(data["telegram_user_id"]),
            status=data.get("status") or OrderStatus.NEW.value,
            phone=data.get("phone"),
            address=data.get("address"),
            created_at=data.get("created_at"),
        )


@dataclass
class OrderItem:
    """Позиция заказа. Цена копируется из товара в момент создания заказа."""

    order_id: str
    product_id: str
    qty: int = 1
    price: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        return cls(
            order_id=str(data["order_id"]),
            product_id=str(data["product_id"]),
            qty=int(data.get("qty", 1)),
            price=float(data["price"]),
        )
