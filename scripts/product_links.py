#!/usr/bin/env python3
"""Вывести deep link в бота для активных товаров каталога."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from bot.config import DEFAULT_BOT_USERNAME, product_deep_link  # noqa: E402
from database import CATEGORIES, StoreError  # noqa: E402
from store_api import create_store_from_env  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ссылки t.me на карточки товаров в боте.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--category",
        action="append",
        choices=sorted(CATEGORIES),
        help="Категория (можно несколько). По умолчанию все.",
    )
    return parser.parse_args()


async def print_links(categories: list[str], username: str) -> int:
    store = await create_store_from_env()
    count = 0
    try:
        for category in categories:
            products = await store.list_active_products(category)
            print(f"\n{CATEGORIES[category]}")
            if not products:
                print("  (нет активных товаров)")
            for product in products:
                count += 1
                print(f"  {product.name}: {product_deep_link(username, product.id)}")
    finally:
        await store.close()
    return count


def main() -> None:
    load_dotenv(os.path.join(ROOT_DIR, ".env"))
    args = parse_args()
    username = os.getenv("BOT_USERNAME") or DEFAULT_BOT_USERNAME

    try:
        count = asyncio.run(print_links(args.category or list(CATEGORIES), username))
    except StoreError as exc:
        print(f"Ошибка хранилища: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"\nВсего ссылок: {count}")


if __name__ == "__main__":
    main()
