"""Тесты локального SQLite-хранилища."""

from __future__ import annotations

import aiosqlite
import pytest

from database import OrderStatus, Product, SQLiteStore, StoreError

from conftest import count_rows


async def test_list_active_products_filters_and_sorts(store: SQLiteStore) -> None:
    await store.add_product(Product(id="3", name="Sidamo", price=600, category="coffee"))
    await store.add_product(Product(id="1", name="Harar", price=1100, category="coffee"))
    await store.add_product(Product(id="2", name="Limu", price=550, category="coffee", is_active=False))
    await store.add_product(Product(id="4", name="Jebena", price=900, category="accessories"))

    products = await store.list_active_products("coffee")

    assert [p.name for p in products] == ["Harar", "Sidamo"]


async def test_unknown_category_is_empty(store: SQLiteStore) -> None:
    assert await store.list_active_products("tea") == []


async def test_get_active_product(store: SQLiteStore, coffee: Product) -> None:
    await store.add_product(coffee)
    await store.add_product(Product(id="old", name="Old", price=1, is_active=False))

    assert await store.get_active_product("P1") == coffee
    assert await store.get_active_product("old") is None
    assert await store.get_active_product("nope") is None


async def test_create_order_writes_order_and_single_item(store: SQLiteStore, coffee: Product) -> None:
    await store.add_product(coffee)

    order = await store.create_order("42", coffee)

    assert order.status == OrderStatus.NEW.value
    assert order.telegram_user_id == "42"
    items = await store.list_order_items(order.id)
    assert len(items) == 1
    assert (items[0].product_id, items[0].qty, items[0].price) == ("P1", 1, 100)


async def test_item_price_is_copied_at_order_time(store: SQLiteStore, coffee: Product) -> None:
    await store.add_product(coffee)
    order = await store.create_order("42", coffee)

    await store.add_product(Product(id="P1", name=coffee.name, price=250, category="coffee"))

    assert (await store.list_order_items(order.id))[0].price == 100


async def test_latest_order_wins(store: SQLiteStore, coffee: Product) -> None:
    await store.add_product(coffee)
    await store.create_order("42", coffee)
    second = await store.create_order("42", coffee)
    await store.create_order("7", coffee)

    latest = await store.get_latest_order("42")

    assert latest is not None
    assert latest.id == second.id


async def test_latest_order_none_for_new_user(store: SQLiteStore) -> None:
    assert await store.get_latest_order("42") is None


async def test_update_order(store: SQLiteStore, coffee: Product) -> None:
    await store.add_product(coffee)
    order = await store.create_order("42", coffee)

    await store.update_order(order.id, phone="+251911000000", status=OrderStatus.CONFIRMED)
    await store.update_order(order.id, address="pickup")

    updated = await store.get_latest_order("42")
    assert (updated.phone, updated.status, updated.address) == ("+251911000000", "confirmed", "pickup")


async def test_update_rejects_unknown_columns(store: SQLiteStore) -> None:
    with pytest.raises(ValueError):
        await store.update_order("x", telegram_user_id="1")


async def test_item_failure_leaves_orphan_order(store: SQLiteStore, coffee: Product) -> None:
    async with aiosqlite.connect(store.path) as db:
        await db.execute("DROP TABLE order_items")
        await db.commit()

    with pytest.raises(StoreError):
        await store.create_order("42", coffee)

    assert await count_rows(store, "orders") == 1


async def test_missing_database_raises_store_error(tmp_path) -> None:
    store = SQLiteStore(tmp_path / "empty.db")

    with pytest.raises(StoreError):
        await store.list_active_products("coffee")
