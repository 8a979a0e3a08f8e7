"""Инициализация и запуск Telegram-бота на вебхуке."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

# Добавляем src в путь для импортов
ROOT_DIR = Path(__file__).resolve().parents[2]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# Загружаем переменные окружения
load_dotenv(ROOT_DIR / ".env")

from bot.config import ConfigError, Settings  # noqa: E402
from bot import handlers  # noqa: E402
from bot.server import create_app  # noqa: E402
from database.store import OrderStore  # noqa: E402
from store_api import SupabaseStore  # noqa: E402

logger = logging.getLogger(__name__)


def build_dispatcher(store: OrderStore, settings: Settings) -> Dispatcher:
    """Диспетчер с хранилищем и настройками в данных обработчиков."""
    dp = Dispatcher(store=store, settings=settings)
    dp.include_router(handlers.router)
    return dp


def main() -> None:
    """Запуск бота."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        print(f"Ошибка конфигурации: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    store = SupabaseStore(settings.supabase_url, settings.supabase_service_key)
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = build_dispatcher(store, settings)
    app = create_app(bot, dp, settings, store)

    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
