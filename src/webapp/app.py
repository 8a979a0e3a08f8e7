"""FastAPI-приложение витрины: каталог, корзина и заглушка оформления заказа."""

from __future__ import annotations

import logging
import os
import re
import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Добавляем src в путь
ROOT_DIR = Path(__file__).resolve().parents[2]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from bot.config import product_deep_link  # noqa: E402
from cart import CartItem, CartKey, CartStore, JsonFileStorage  # noqa: E402
from database import Product, StoreError  # noqa: E402
from database.store import OrderStore  # noqa: E402
from store_api import create_store_from_env  # noqa: E402

logger = logging.getLogger(__name__)

CART_COOKIE = "cart_id"
CART_ID_RE = re.compile(r"^[0-9a-f]{32}$")
DEFAULT_CARTS_DIR = ROOT_DIR / "data" / "carts"


class AddToCart(BaseModel):
    productId: str
    quantity: Optional[int] = None
    variantId: Optional[str] = None
    variantName: Optional[str] = None


class SetQuantity(BaseModel):
    productId: str
    variantId: Optional[str] = None
    quantity: int


class CheckoutRequest(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = Field(default="", description="Адрес доставки или pickup")


def create_app(
    store: Optional[OrderStore] = None,
    *,
    carts_dir: Optional[Path] = None,
    bot_username: Optional[str] = None,
) -> FastAPI:
    """Собрать приложение. Без store хранилище выбирается по окружению при старте."""

    carts_path = Path(carts_dir or os.getenv("CARTS_DIR") or DEFAULT_CARTS_DIR)
    username = bot_username if bot_username is not None else os.getenv("BOT_USERNAME")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = await create_store_from_env()
        try:
            yield
        finally:
            if owns_store:
                await app.state.store.close()

    app = FastAPI(title="Tomoca Coffee storefront", lifespan=lifespan)
    app.state.store = store

    def get_store(request: Request) -> OrderStore:
        current = request.app.state.store
        if current is None:
            raise HTTPException(status_code=503, detail="Store is not initialised")
        return current

    def get_cart(request: Request, response: Response) -> CartStore:
        """Корзина по cookie cart_id; новая cookie, если её нет."""
        cart_id = request.cookies.get(CART_COOKIE, "")
        if not CART_ID_RE.match(cart_id):
            cart_id = uuid.uuid4().hex
            response.set_cookie(CART_COOKIE, cart_id, httponly=True, samesite="lax")
        return CartStore(JsonFileStorage(carts_path / f"{cart_id}.json"))

    def product_payload(product: Product) -> dict:
        data = {
            "id": product.id,
            "name": product.name,
            "price": product.price,
            "imageUrl": product.image_url,
            "description": product.description,
            "category": product.category,
        }
        if username:
            data["telegramUrl"] = product_deep_link(username, product.id)
        return data

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/products")
    async def list_products(category: str = Query(...), store: OrderStore = Depends(get_store)):
        """Активные товары категории."""
        try:
            products = await store.list_active_products(category)
        except StoreError as exc:
            logger.warning("Каталог недоступен: %s", exc)
            return JSONResponse({"error": "Error loading products. Please try again."}, status_code=502)
        return {"success": True, "data": [product_payload(p) for p in products]}

    @app.get("/api/products/{product_id}")
    async def get_product(product_id: str, store: OrderStore = Depends(get_store)):
        try:
            product = await store.get_active_product(product_id)
        except StoreError as exc:
            logger.warning("Товар %s недоступен: %s", product_id, exc)
            return JSONResponse({"error": "Error loading product. Please try again."}, status_code=502)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return {"success": True, "data": product_payload(product)}

    @app.get("/api/cart")
    async def get_cart_summary(cart: CartStore = Depends(get_cart)) -> dict:
        return cart.summary()

    @app.post("/api/cart/items")
    async def add_to_cart(
        body: AddToCart,
        cart: CartStore = Depends(get_cart),
        store: OrderStore = Depends(get_store),
    ):
        """Положить товар в корзину; имя и цену берём из каталога."""
        try:
            product = await store.get_active_product(body.productId)
        except StoreError as exc:
            logger.warning("Товар %s недоступен: %s", body.productId, exc)
            return JSONResponse({"error": "Error loading product. Please try again."}, status_code=502)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")

        cart.add_item(
            CartItem(
                product_id=product.id,
                name=product.name,
                unit_price=product.price,
                image_url=product.image_url,
                variant_id=body.variantId,
                variant_name=body.variantName,
            ),
            body.quantity,
        )
        return cart.summary()

    @app.patch("/api/cart/items")
    async def set_quantity(body: SetQuantity, cart: CartStore = Depends(get_cart)) -> dict:
        cart.set_quantity(CartKey(body.productId, body.variantId), body.quantity)
        return cart.summary()

    @app.delete("/api/cart/items")
    async def remove_from_cart(
        productId: str = Query(...),
        variantId: Optional[str] = Query(None),
        cart: CartStore = Depends(get_cart),
    ) -> dict:
        cart.remove_item(CartKey(productId, variantId))
        return cart.summary()

    @app.delete("/api/cart")
    async def clear_cart(cart: CartStore = Depends(get_cart)) -> dict:
        cart.clear()
        return cart.summary()

    @app.post("/api/checkout")
    async def checkout(body: CheckoutRequest, cart: CartStore = Depends(get_cart)):
        """Оформить заказ (заглушка: без оплаты и без записи в базу)."""
        if not cart.items:
            return JSONResponse(
                {"error": "Cart is empty", "message": "Add items before checking out."},
                status_code=400,
            )

        summary = cart.summary()
        cart.clear()

        # TODO: сохранять заказ в orders/order_items и подключить оплату Telebirr
        order_id = uuid.uuid4().hex[:8].upper()
        logger.info("Checkout %s: %s позиций на %.2f", order_id, summary["itemCount"], summary["subtotal"])
        return {
            "success": True,
            "order_id": order_id,
            "status": "CREATED",
            "itemCount": summary["itemCount"],
            "total": summary["subtotal"],
            "message": "Order placed",
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("STOREFRONT_PORT", "8000")))


if __name__ == "__main__":
    main()
