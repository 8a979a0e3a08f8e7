"""Клиент Supabase (PostgREST) для каталога и заказов."""

from __future__ import annotations

import os
from typing import Any, Optional

import httpx
from dotenv import load_dotenv

from database.models import Order, OrderItem, OrderStatus, Product
from database.store import StoreError


ENV_VAR_URL = "SUPABASE_URL"
ENV_VAR_SERVICE_KEY = "SUPABASE_SERVICE_ROLE_KEY"
REST_PREFIX = "/rest/v1"
PRODUCT_FIELDS = "id,name,price,image_url,description,category,is_active"
ORDER_UPDATE_FIELDS = frozenset({"phone", "address", "status"})

load_dotenv()


class SupabaseAPIError(StoreError):
    """Ошибка при обращении к REST API Supabase."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SupabaseStore:
    """Хранилище каталога и заказов поверх PostgREST.

    Ключ сервисной роли обходит RLS, поэтому клиент живёт только на сервере
    (бот, API витрины).
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}{REST_PREFIX}",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_env(
        cls,
        *,
        timeout: float = 10.0,
        url_var: str = ENV_VAR_URL,
        key_var: str = ENV_VAR_SERVICE_KEY,
    ) -> "SupabaseStore":
        """Создать клиента из .env / переменных окружения."""

        base_url = os.getenv(url_var)
        service_key = os.getenv(key_var)
        if not base_url:
            raise SupabaseAPIError(f"Missing required env var: {url_var}")
        if not service_key:
            raise SupabaseAPIError(f"Missing required env var: {key_var}")
        return cls(base_url, service_key, timeout=timeout)

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        returning: bool = False,
    ) -> list[dict]:
        """Базовый метод выполнения HTTP-запроса к таблице."""

        headers = {"Prefer": "return=representation"} if returning else None
        try:
            response = await self._client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise SupabaseAPIError(f"Network error on {method} {table}: {exc}") from exc

        if response.status_code >= 400:
            try:
                detail = response.json().get("message") or response.text
            except ValueError:
                detail = response.text
            raise SupabaseAPIError(
                f"Supabase error {response.status_code} on {method} {table}: {detail}",
                status_code=response.status_code,
            )

        if not response.content:
            return []
        payload = response.json()
        if isinstance(payload, dict):
            return [payload]
        return payload or []

    async def list_active_products(self, category: str) -> list[Product]:
        """Активные товары категории, отсортированные по имени."""

        rows = await self._request(
            "GET",
            "products",
            params={
                "select": PRODUCT_FIELDS,
                "is_active": "eq.true",
                "category": f"eq.{category}",
                "order": "name.asc",
            },
        )
        return [Product.from_dict(row) for row in rows]

    async def get_active_product(self, product_id: str) -> Optional[Product]:
        rows = await self._request(
            "GET",
            "products",
            params={
                "select": PRODUCT_FIELDS,
                "id": f"eq.{product_id}",
                "is_active": "eq.true",
                "limit": "1",
            },
        )
        if not rows:
            return None
        return Product.from_dict(rows[0])

    async def create_order(self, telegram_user_id: str, product: Product) -> Order:
        """Создать заказ и его единственную позицию.

        Две независимые вставки: если вторая упадёт, заказ останется без позиции.
        """

        rows = await self._request(
            "POST",
            "orders",
            json=[{"telegram_user_id": telegram_user_id, "status": OrderStatus.NEW.value}],
            returning=True,
        )
        if not rows:
            raise SupabaseAPIError("Supabase did not return the created order")
        order = Order.from_dict(rows[0])

        await self._request(
            "POST",
            "order_items",
            json=[{
                "order_id": order.id,
                "product_id": product.id,
                "qty": 1,
                "price": product.price,
            }],
        )
        return order

    async def get_latest_order(self, telegram_user_id: str) -> Optional[Order]:
        rows = await self._request(
            "GET",
            "orders",
            params={
                "select": "*",
                "telegram_user_id": f"eq.{telegram_user_id}",
                "order": "created_at.desc",
                "limit": "1",
            },
        )
        if not rows:
            return None
        return Order.from_dict(rows[0])

    async def update_order(self, order_id: str, **fields) -> None:
        unknown = set(fields) - ORDER_UPDATE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update order fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        body = {k: v.value if isinstance(v, OrderStatus) else v for k, v in fields.items()}
        await self._request("PATCH", "orders", params={"id": f"eq.{order_id}"}, json=body)

    async def list_order_items(self, order_id: str) -> list[OrderItem]:
        rows = await self._request(
            "GET",
            "order_items",
            params={"select": "order_id,product_id,qty,price", "order_id": f"eq.{order_id}"},
        )
        return [OrderItem.from_dict(row) for row in rows]

    async def close(self) -> None:
        await self._client.aclose()
