#!/usr/bin/env python3
"""Заполнить локальную SQLite-базу тестовым каталогом."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from database import DB_PATH, Product, SQLiteStore  # noqa: E402


SAMPLE_PRODUCTS = [
    Product(
        id="yirgacheffe-250",
        name="Yirgacheffe 250g",
        price=650,
        description="Washed Yirgacheffe, floral and citrus notes.",
        category="coffee",
    ),
    Product(
        id="sidamo-250",
        name="Sidamo 250g",
        price=600,
        description="Natural Sidamo, berries and dark chocolate.",
        category="coffee",
    ),
    Product(
        id="harar-500",
        name="Harar 500g",
        price=1100,
        description="Dry-processed Harar with a winey finish.",
        category="coffee",
    ),
    Product(
        id="jebena",
        name="Clay Jebena",
        price=900,
        description="Traditional clay coffee pot.",
        category="accessories",
    ),
    Product(
        id="cini-set",
        name="Cini Cup Set",
        price=450,
        description="Six handle-less ceremony cups.",
        category="accessories",
    ),
    Product(
        id="gift-card",
        name="Gift Card",
        price=1000,
        category="other",
    ),
    Product(
        id="limu-retired",
        name="Limu 250g",
        price=550,
        category="coffee",
        is_active=False,
    ),
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Заполнить локальную базу тестовыми товарами.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--db", type=Path, default=DB_PATH, help="Путь к файлу SQLite")
    return parser.parse_args()


async def seed(db_path: Path) -> int:
    store = SQLiteStore(db_path)
    await store.init_db()
    for product in SAMPLE_PRODUCTS:
        await store.add_product(product)
    return len(SAMPLE_PRODUCTS)


def main() -> None:
    args = parse_args()
    count = asyncio.run(seed(args.db))
    print(f"✅ Товаров записано: {count} → {args.db}")


if __name__ == "__main__":
    main()
