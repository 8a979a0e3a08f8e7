"""Тесты настроек бота."""

from __future__ import annotations

import pytest

from bot.config import REQUIRED_VARS, ConfigError, Settings, product_deep_link


FULL_ENV = {
    "BOT_TOKEN": "123456:TEST",
    "SUPABASE_URL": "https://example.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "service-key",
    "PUBLIC_BASE_URL": "https://bot.example.com/",
    "WEBHOOK_SECRET": "s3cret",
}


def test_defaults() -> None:
    settings = Settings.from_env(FULL_ENV)

    assert settings.bot_username == "Tomocashopbot"
    assert settings.port == 3000
    assert settings.admin_chat_id is None


def test_webhook_url_strips_trailing_slash() -> None:
    settings = Settings.from_env(FULL_ENV)

    assert settings.webhook_path == "/webhook/s3cret"
    assert settings.webhook_url == "https://bot.example.com/webhook/s3cret"


def test_optional_values() -> None:
    env = {**FULL_ENV, "BOT_USERNAME": "@TomocaBot", "PORT": "8080", "ADMIN_CHAT_ID": "-100123"}
    settings = Settings.from_env(env)

    assert settings.bot_username == "TomocaBot"
    assert settings.port == 8080
    assert settings.admin_chat_id == "-100123"


@pytest.mark.parametrize("missing", REQUIRED_VARS)
def test_missing_required_var_names_it(missing: str) -> None:
    env = {k: v for k, v in FULL_ENV.items() if k != missing}

    with pytest.raises(ConfigError, match=f"Missing required env var: {missing}"):
        Settings.from_env(env)


def test_empty_required_var_counts_as_missing() -> None:
    with pytest.raises(ConfigError, match="WEBHOOK_SECRET"):
        Settings.from_env({**FULL_ENV, "WEBHOOK_SECRET": ""})


def test_bad_port() -> None:
    with pytest.raises(ConfigError, match="PORT"):
        Settings.from_env({**FULL_ENV, "PORT": "http"})


def test_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("ADMIN_CHAT_ID", raising=False)

    assert Settings.from_env().bot_token == "123456:TEST"


def test_product_deep_link() -> None:
    assert product_deep_link("@Tomocashopbot", "abc-1") == "https://t.me/Tomocashopbot?start=product_abc-1"
