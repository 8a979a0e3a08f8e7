"""Корзина покупателя с сохранением в локальное хранилище."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Optional

from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

STORAGE_KEY = "tomoca_cart_v1"


@dataclass(frozen=True)
class CartKey:
    """Идентичность позиции: товар + вариант (None и "" равнозначны)."""

    product_id: str
    variant_id: Optional[str] = None

    @property
    def ident(self) -> str:
        return f"{self.product_id}::{self.variant_id or ''}"


@dataclass
class CartItem:
    """Позиция корзины. Имя и картинка денормализованы для отображения."""

    product_id: str
    name: str
    unit_price: float
    quantity: int = 1
    image_url: Optional[str] = None
    variant_id: Optional[str] = None
    variant_name: Optional[str] = None

    @property
    def key(self) -> CartKey:
        return CartKey(self.product_id, self.variant_id)

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "imageUrl": self.image_url,
            "unitPrice": self.unit_price,
            "quantity": self.quantity,
            "variantId": self.variant_id,
            "variantName": self.variant_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(
            product_id=str(data["productId"]),
            name=data.get("name") or "",
            unit_price=float(data["unitPrice"]),
            quantity=max(1, int(data.get("quantity", 1))),
            image_url=data.get("imageUrl"),
            variant_id=data.get("variantId"),
            variant_name=data.get("variantName"),
        )


def _clamp(quantity: int) -> int:
    return max(1, int(quantity))


class CartStore:
    """Список позиций корзины и производные итоги.

    Каждая мутация целиком записывает список в хранилище. Ошибки записи
    глотаются: состояние в памяти остаётся главным до конца сессии.
    """

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._items: list[CartItem] = self._restore()

    def _restore(self) -> list[CartItem]:
        try:
            raw = self._storage.get_item(self._key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                return []
            return [CartItem.from_dict(entry) for entry in data]
        except (StorageError, OSError, ValueError, TypeError, KeyError) as exc:
            logger.debug("Корзина %s не восстановлена: %s", self._key, exc)
            return []

    def _persist(self) -> None:
        try:
            payload = json.dumps([item.to_dict() for item in self._items], ensure_ascii=False)
            self._storage.set_item(self._key, payload)
        except (StorageError, OSError, ValueError, TypeError) as exc:
            logger.debug("Корзина %s не сохранена: %s", self._key, exc)

    def _index(self, key: CartKey) -> int:
        for idx, item in enumerate(self._items):
            if item.key.ident == key.ident:
                return idx
        return -1

    @property
    def items(self) -> list[CartItem]:
        return [replace(item) for item in self._items]

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> float:
        return sum(item.unit_price * item.quantity for item in self._items)

    def add_item(self, item: CartItem, quantity: Optional[int] = None) -> None:
        """Добавить товар; при совпадении ключа увеличить количество."""
        qty = _clamp(item.quantity if quantity is None else quantity)
        idx = self._index(item.key)
        if idx == -1:
            self._items.append(replace(item, quantity=qty))
        else:
            current = self._items[idx]
            self._items[idx] = replace(current, quantity=current.quantity + qty)
        self._persist()

    def remove_item(self, key: CartKey) -> None:
        idx = self._index(key)
        if idx == -1:
            return
        del self._items[idx]
        self._persist()

    def set_quantity(self, key: CartKey, quantity: int) -> None:
        """Задать количество. Меньше 1 не бывает: удаление только через remove_item."""
        idx = self._index(key)
        if idx == -1:
            return
        self._items[idx] = replace(self._items[idx], quantity=_clamp(quantity))
        self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    def summary(self) -> dict:
        return {
            "items": [item.to_dict() for item in self._items],
            "itemCount": self.item_count,
            "subtotal": self.subtotal,
        }
