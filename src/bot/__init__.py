"""Telegram-бот для заказа через чат."""
