"""Клавиатуры бота."""

from __future__ import annotations

from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
)

from database.models import CATEGORIES, Product

# callback_data
SHOP = "SHOP"
HELP = "HELP"
CATEGORY_PREFIX = "CAT_"
PRODUCT_PREFIX = "PROD_"
ORDER_PREFIX = "ORDER_"


def main_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🛍️ Shop", callback_data=SHOP)],
        [InlineKeyboardButton(text="ℹ️ Help", callback_data=HELP)],
    ])


def categories_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=label, callback_data=f"{CATEGORY_PREFIX}{category}")]
        for category, label in CATEGORIES.items()
    ])


def products_menu(products: list[Product]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(
            text=f"{p.name} - {format_price(p.price)}",
            callback_data=f"{PRODUCT_PREFIX}{p.id}",
        )]
        for p in products
    ])


def product_menu(product: Product, back_text: str = "⬅️ Back") -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="✅ Order", callback_data=f"{ORDER_PREFIX}{product.id}")],
        [InlineKeyboardButton(text=back_text, callback_data=SHOP)],
    ])


def contact_request() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="📞 Share phone number", request_contact=True)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def remove_keyboard() -> ReplyKeyboardRemove:
    return ReplyKeyboardRemove()


def format_price(price: float) -> str:
    # 100.0 -> "100", 12.345 -> "12.345" (без округления)
    return str(int(price)) if float(price).is_integer() else str(price)
