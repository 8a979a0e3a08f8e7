"""Обработчики команд и сообщений Telegram-бота.

Сессии нет: телефон и адрес всегда пишутся в последний заказ пользователя.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from aiogram import F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message
from aiogram.utils.markdown import hbold
from aiogram.utils.text_decorations import html_decoration

from database.models import Order, OrderStatus, Product
from database.store import OrderStore, StoreError

from .config import Settings
from .keyboards import (
    CATEGORY_PREFIX,
    HELP,
    ORDER_PREFIX,
    PRODUCT_PREFIX,
    SHOP,
    categories_menu,
    contact_request,
    format_price,
    main_menu,
    product_menu,
    products_menu,
    remove_keyboard,
)

if TYPE_CHECKING:
    from aiogram import Bot

logger = logging.getLogger(__name__)

router = Router()

DEEP_LINK_PREFIX = "product_"

TEXT_WELCOME = "Welcome ☕\nChoose an option:"
TEXT_CHOOSE_CATEGORY = "Choose a category:"
TEXT_HELP = "Use Shop to browse products and place an order."
TEXT_HELP_COMMAND = "Use /shop to browse products and place an order."
TEXT_LOAD_ERROR = "Error loading products. Please try again."
TEXT_NO_PRODUCTS = "No products found in this category."
TEXT_DEEP_LINK_NOT_FOUND = "Sorry, that product was not found or is not active."
TEXT_PRODUCT_NOT_FOUND = "Product not found."
TEXT_ORDER_FAILED = "Could not create order. Please try again."
TEXT_NO_ACTIVE_ORDER = "No active order found. Use Shop to start a new order."
TEXT_PHONE_SAVED = "✅ Phone saved. Now type your delivery address (or type: pickup)."
TEXT_PHONE_FAILED = "Could not save your phone number. Please try again."
TEXT_ADDRESS_SAVED = "🎉 Address saved! We’ll contact you soon."
TEXT_ADDRESS_FAILED = "Could not save your address. Please try again."


def product_card_text(product: Product) -> str:
    return (
        f"{hbold(product.name)}\n"
        f"Price: {format_price(product.price)}\n\n"
        f"{html_decoration.quote(product.description or '')}"
    )


async def send_product_card(message: Message, product: Product, back_text: str = "⬅️ Back") -> None:
    """Карточка товара: фото (если есть), описание и кнопка заказа."""
    if product.image_url:
        await message.answer_photo(product.image_url, caption=html_decoration.quote(product.name))
    await message.answer(product_card_text(product), reply_markup=product_menu(product, back_text))


async def find_product(store: OrderStore, product_id: str) -> Optional[Product]:
    """Активный товар или None.

    Ошибка запроса (например, id не в формате UUID) тоже означает «не найден».
    """
    try:
        return await store.get_active_product(product_id)
    except StoreError as exc:
        logger.warning("Не удалось загрузить товар %s: %s", product_id, exc)
        return None


async def notify_admin(bot: "Bot", settings: Settings, order: Order, product: Product) -> None:
    """Уведомить администратора о новом заказе. Ошибки не повторяются."""
    if not settings.admin_chat_id:
        return
    text = (
        "🧾 New Order\n"
        f"Order ID: {order.id}\n"
        f"User: {order.telegram_user_id}\n"
        f"Product: {html_decoration.quote(product.name)}\n"
        f"Price: {format_price(product.price)}"
    )
    try:
        await bot.send_message(settings.admin_chat_id, text)
    except TelegramAPIError as exc:
        logger.warning("Не удалось уведомить администратора о заказе %s: %s", order.id, exc)


@router.message(CommandStart())
async def cmd_start(message: Message, command: CommandObject, store: OrderStore) -> None:
    """Обработчик команды /start, в том числе deep link product_<id>."""
    payload = (command.args or "").strip()

    if payload.startswith(DEEP_LINK_PREFIX):
        product = await find_product(store, payload[len(DEEP_LINK_PREFIX):])
        if not product:
            await message.answer(TEXT_DEEP_LINK_NOT_FOUND, reply_markup=main_menu())
            return

        await send_product_card(message, product, back_text="⬅️ Back to Shop")
        return

    await message.answer(TEXT_WELCOME, reply_markup=main_menu())


@router.message(Command("shop"))
async def cmd_shop(message: Message) -> None:
    await message.answer(TEXT_CHOOSE_CATEGORY, reply_markup=categories_menu())


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(TEXT_HELP_COMMAND)


@router.callback_query(F.data == HELP)
async def on_help(callback: CallbackQuery) -> None:
    await callback.answer()
    if callback.message is None:
        return
    await callback.message.answer(TEXT_HELP)


@router.callback_query(F.data == SHOP)
async def on_shop(callback: CallbackQuery) -> None:
    await callback.answer()
    if callback.message is None:
        return
    await callback.message.answer(TEXT_CHOOSE_CATEGORY, reply_markup=categories_menu())


@router.callback_query(F.data.startswith(CATEGORY_PREFIX))
async def on_category(callback: CallbackQuery, store: OrderStore) -> None:
    """Список активных товаров категории."""
    await callback.answer()
    if callback.message is None:
        return
    category = callback.data[len(CATEGORY_PREFIX):]

    try:
        products = await store.list_active_products(category)
    except StoreError:
        logger.exception("Не удалось загрузить товары категории %s", category)
        await callback.message.answer(TEXT_LOAD_ERROR)
        return

    if not products:
        await callback.message.answer(TEXT_NO_PRODUCTS, reply_markup=categories_menu())
        return

    await callback.message.answer(
        f"Products in {html_decoration.quote(category)}:",
        reply_markup=products_menu(products),
    )


@router.callback_query(F.data.startswith(PRODUCT_PREFIX))
async def on_product(callback: CallbackQuery, store: OrderStore) -> None:
    await callback.answer()
    if callback.message is None:
        return
    product = await find_product(store, callback.data[len(PRODUCT_PREFIX):])
    if not product:
        await callback.message.answer(TEXT_PRODUCT_NOT_FOUND, reply_markup=categories_menu())
        return

    await send_product_card(callback.message, product)


@router.callback_query(F.data.startswith(ORDER_PREFIX))
async def on_order(callback: CallbackQuery, bot: "Bot", store: OrderStore, settings: Settings) -> None:
    """Создать заказ на один товар и запросить телефон."""
    await callback.answer()
    if callback.message is None:
        return
    telegram_user_id = str(callback.from_user.id)

    product = await find_product(store, callback.data[len(ORDER_PREFIX):])
    if not product:
        await callback.message.answer(TEXT_PRODUCT_NOT_FOUND, reply_markup=categories_menu())
        return

    try:
        order = await store.create_order(telegram_user_id, product)
    except StoreError:
        logger.exception("Не удалось создать заказ пользователя %s", telegram_user_id)
        await callback.message.answer(TEXT_ORDER_FAILED)
        return

    logger.info("Заказ %s: пользователь %s, товар %s", order.id, telegram_user_id, product.id)
    await callback.message.answer(
        f"✅ Order created!\nItem: {html_decoration.quote(product.name)}\nQty: 1\n\nNext: send your phone number.",
        reply_markup=contact_request(),
    )
    await notify_admin(bot, settings, order, product)


@router.message(F.contact)
async def on_contact(message: Message, store: OrderStore) -> None:
    """Телефон из контакта -> последний заказ пользователя, статус confirmed."""
    telegram_user_id = str(message.from_user.id)
    phone = message.contact.phone_number

    try:
        order = await store.get_latest_order(telegram_user_id)
        if not order:
            await message.answer(TEXT_NO_ACTIVE_ORDER, reply_markup=main_menu())
            return
        await store.update_order(order.id, phone=phone, status=OrderStatus.CONFIRMED.value)
    except StoreError:
        logger.exception("Не удалось сохранить телефон пользователя %s", telegram_user_id)
        await message.answer(TEXT_PHONE_FAILED)
        return

    await message.answer(TEXT_PHONE_SAVED, reply_markup=remove_keyboard())


@router.message(F.text)
async def on_text(message: Message, store: OrderStore) -> None:
    """Любой текст (не команда) считаем адресом для последнего заказа."""
    text = message.text
    if text.startswith("/"):
        return
    telegram_user_id = str(message.from_user.id)

    try:
        order = await store.get_latest_order(telegram_user_id)
        if not order:
            return
        await store.update_order(order.id, address=text)
    except StoreError:
        logger.exception("Не удалось сохранить адрес пользователя %s", telegram_user_id)
        await message.answer(TEXT_ADDRESS_FAILED)
        return

    await message.answer(TEXT_ADDRESS_SAVED, reply_markup=main_menu())
