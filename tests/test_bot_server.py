"""Тесты вебхук-сервера бота."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bot.config import Settings
from bot.server import create_app

UPDATE = {
    "update_id": 10,
    "message": {
        "message_id": 1,
        "date": 1767225600,
        "chat": {"id": 42, "type": "private"},
        "from": {"id": 42, "is_bot": False, "first_name": "Abebe"},
        "text": "/start",
    },
}


@pytest.fixture()
def parts():
    bot = MagicMock()
    bot.set_webhook = AsyncMock()
    bot.session.close = AsyncMock()
    dp = MagicMock()
    dp.feed_update = AsyncMock()
    store = MagicMock()
    store.close = AsyncMock()
    return bot, dp, store


def test_liveness(parts, settings: Settings) -> None:
    client = TestClient(create_app(*parts[:2], settings, parts[2]))

    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "OK"


def test_webhook_feeds_update(parts, settings: Settings) -> None:
    bot, dp, store = parts
    client = TestClient(create_app(bot, dp, settings, store))

    response = client.post("/webhook/s3cret", json=UPDATE)

    assert response.status_code == 200
    dp.feed_update.assert_awaited_once()
    fed_bot, update = dp.feed_update.call_args.args
    assert fed_bot is bot
    assert update.update_id == 10
    assert update.message.text == "/start"


def test_wrong_secret_is_not_found(parts, settings: Settings) -> None:
    bot, dp, store = parts
    client = TestClient(create_app(bot, dp, settings, store))

    response = client.post("/webhook/guess", json=UPDATE)

    assert response.status_code == 404
    dp.feed_update.assert_not_awaited()


def test_malformed_update_is_acknowledged(parts, settings: Settings) -> None:
    bot, dp, store = parts
    client = TestClient(create_app(bot, dp, settings, store))

    bad_json = client.post(
        "/webhook/s3cret", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    bad_update = client.post("/webhook/s3cret", json={"message": "no update id"})

    assert bad_json.status_code == 200
    assert bad_update.status_code == 200
    dp.feed_update.assert_not_awaited()


def test_lifespan_registers_webhook_and_closes(parts, settings: Settings) -> None:
    bot, dp, store = parts

    with TestClient(create_app(bot, dp, settings, store)) as client:
        client.get("/")
        bot.set_webhook.assert_awaited_once_with("https://bot.example.com/webhook/s3cret")

    bot.session.close.assert_awaited_once()
    store.close.assert_awaited_once()


def test_non_ascii_secret_is_not_found(parts, settings: Settings) -> None:
    bot, dp, store = parts
    client = TestClient(create_app(bot, dp, settings, store))

    response = client.post("/webhook/é", json=UPDATE)

    assert response.status_code == 404
    dp.feed_update.assert_not_awaited()


def test_build_dispatcher_injects_store_and_settings(fresh_handlers, settings: Settings) -> None:
    from bot.bot import build_dispatcher

    store = MagicMock()
    dp = build_dispatcher(store, settings)

    assert dp["store"] is store
    assert dp["settings"] is settings
    assert fresh_handlers.router in dp.sub_routers
