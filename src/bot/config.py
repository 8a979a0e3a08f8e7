"""Настройки бота из переменных окружения."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_BOT_USERNAME = "Tomocashopbot"
DEFAULT_PORT = 3000

REQUIRED_VARS = (
    "BOT_TOKEN",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "PUBLIC_BASE_URL",
    "WEBHOOK_SECRET",
)


class ConfigError(Exception):
    """Не задана обязательная настройка."""


@dataclass(frozen=True)
class Settings:
    bot_token: str
    supabase_url: str
    supabase_service_key: str
    public_base_url: str
    webhook_secret: str
    bot_username: str = DEFAULT_BOT_USERNAME
    port: int = DEFAULT_PORT
    admin_chat_id: Optional[str] = None

    @property
    def webhook_path(self) -> str:
        return f"/webhook/{self.webhook_secret}"

    @property
    def webhook_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}{self.webhook_path}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Собрать настройки; без обязательной переменной бот не стартует."""
        env = os.environ if environ is None else environ

        for name in REQUIRED_VARS:
            if not env.get(name):
                raise ConfigError(f"Missing required env var: {name}")

        raw_port = env.get("PORT") or str(DEFAULT_PORT)
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigError(f"PORT must be an integer, got {raw_port!r}") from exc

        return cls(
            bot_token=env["BOT_TOKEN"],
            supabase_url=env["SUPABASE_URL"],
            supabase_service_key=env["SUPABASE_SERVICE_ROLE_KEY"],
            public_base_url=env["PUBLIC_BASE_URL"],
            webhook_secret=env["WEBHOOK_SECRET"],
            bot_username=(env.get("BOT_USERNAME") or DEFAULT_BOT_USERNAME).lstrip("@"),
            port=port,
            admin_chat_id=env.get("ADMIN_CHAT_ID") or None,
        )


def product_deep_link(bot_username: str, product_id: str) -> str:
    """Ссылка, открывающая карточку товара в боте."""
    return f"https://t.me/{bot_username.lstrip('@')}?start=product_{product_id}"
