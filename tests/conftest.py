"""Общие фикстуры тестов."""

from __future__ import annotations

import importlib
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import aiosqlite
import pytest

from bot.config import Settings
from database import Product, SQLiteStore

USER_ID = 424242


@pytest.fixture()
async def store(tmp_path) -> SQLiteStore:
    """Чистая SQLite-база на каждый тест."""
    db = SQLiteStore(tmp_path / "shop.db")
    await db.init_db()
    return db


@pytest.fixture()
def coffee() -> Product:
    return Product(
        id="P1",
        name="Yirgacheffe 250g",
        price=100,
        description="Floral & citrus",
        category="coffee",
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        bot_token="123456:TEST",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        public_base_url="https://bot.example.com/",
        webhook_secret="s3cret",
        admin_chat_id="999",
    )


@pytest.fixture()
def bot() -> MagicMock:
    mock_bot = MagicMock()
    mock_bot.send_message = AsyncMock()
    return mock_bot


def make_message(text: Optional[str] = None, *, user_id: int = USER_ID, contact=None) -> MagicMock:
    message = MagicMock()
    message.text = text
    message.from_user.id = user_id
    message.contact = contact
    message.answer = AsyncMock()
    message.answer_photo = AsyncMock()
    return message


def make_callback(data: str, *, user_id: int = USER_ID) -> MagicMock:
    callback = MagicMock()
    callback.data = data
    callback.from_user.id = user_id
    callback.answer = AsyncMock()
    callback.message = make_message(user_id=user_id)
    return callback


async def count_rows(store: SQLiteStore, table: str) -> int:
    async with aiosqlite.connect(store.path) as db:
        async with db.execute(f"SELECT COUNT(*) FROM {table}") as cursor:
            (count,) = await cursor.fetchone()
    return count


@pytest.fixture()
def fresh_handlers():
    """Модуль обработчиков с новым роутером: роутер подключается к одному диспетчеру."""
    import bot.handlers

    return importlib.reload(bot.handlers)
