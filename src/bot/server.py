"""FastAPI-сервер вебхука Telegram."""

from __future__ import annotations

import hmac
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from database.store import OrderStore

from .config import Settings

logger = logging.getLogger(__name__)


def create_app(bot: Bot, dp: Dispatcher, settings: Settings, store: OrderStore) -> FastAPI:
    """Приложение с проверкой живости и приёмом обновлений.

    Секрет проверяется только по пути URL, подписи у запросов нет.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await bot.set_webhook(settings.webhook_url)
        logger.info("Bot @%s webhook set to: %s", settings.bot_username, settings.webhook_url)
        try:
            yield
        finally:
            await bot.session.close()
            await store.close()

    app = FastAPI(title="Tomoca Telegram bot", lifespan=lifespan)

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "OK"

    @app.post("/webhook/{secret}", response_class=PlainTextResponse)
    async def webhook(secret: str, request: Request) -> str:
        if not hmac.compare_digest(secret.encode(), settings.webhook_secret.encode()):
            raise HTTPException(status_code=404)

        try:
            data = await request.json()
        except ValueError as exc:
            # 200, чтобы Telegram не присылал битое обновление повторно
            logger.warning("Webhook: невалидный JSON: %s", exc)
            return "OK"

        try:
            update = Update.model_validate(data, context={"bot": bot})
        except ValidationError as exc:
            logger.warning("Webhook: обновление не распознано: %s", exc)
            return "OK"

        await dp.feed_update(bot, update)
        return "OK"

    return app
