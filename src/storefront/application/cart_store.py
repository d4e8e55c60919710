"""Application service: the shopper's cart.

CartStore owns the in-memory Cart and keeps it in sync with durable
key/value storage. Every mutation builds the new cart on a copy,
persists it, and only then adopts it, so memory never runs ahead of
storage.

Quantity increases go through ``ensure_stock_available`` first.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from storefront.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    StorageError,
)
from storefront.domain.model.cart import Cart, CartLineItem, CartSnapshot, GiftLineItem
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.port.stock_oracle import StockOracle
from storefront.domain.repository.key_value_storage import KeyValueStorage
from storefront.domain.service.stock_gate import ensure_stock_available

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "storefront_cart"


class CartStore:

    def __init__(
        self,
        stock_oracle: StockOracle,
        storage: KeyValueStorage,
        on_item_added: Callable[[CartLineItem], None] | None = None,
    ) -> None:
        self._stock_oracle = stock_oracle
        self._storage = storage
        self._on_item_added = on_item_added
        self._cart = self._load()

    # --- Queries --------------------------------------------------------------

    def snapshot(self) -> CartSnapshot:
        return self._cart.snapshot()

    def quantity_of(self, product_id: str, package_option_id: str) -> int:
        return self._cart.quantity_of(product_id, package_option_id)

    # --- Cart lines -----------------------------------------------------------

    def add_to_cart(
        self, product_id: str, package_option_id: str, quantity: int
    ) -> CartLineItem:
        """Add ``quantity`` units of a variant, merging with an existing line.

        Raises:
            InvalidQuantity: if ``quantity`` is not a positive integer.
            ProductUnavailable: if the variant is unknown or inactive.
            InsufficientStock: if the cart would hold more than is in stock.
        """
        Quantity(quantity)  # raises InvalidQuantity
        held = self._cart.quantity_of(product_id, package_option_id)
        self._check_stock(product_id, package_option_id, held, quantity)

        cart = self._cart.copy()
        line = cart.add(product_id, package_option_id, quantity)
        self._commit(cart)

        logger.debug("Added %d x %s/%s to cart", quantity, product_id, package_option_id)
        if self._on_item_added is not None:
            self._on_item_added(line)
        return line

    def update_quantity(
        self, product_id: str, package_option_id: str, new_quantity: int
    ) -> None:
        """Set a line's quantity; zero or less removes the line.

        Only an increase is stock-checked, and only for the difference.
        """
        current = self._cart.quantity_of(product_id, package_option_id)
        if current == 0:
            raise EntityNotFoundError(
                f"Item {product_id}/{package_option_id} not found in cart"
            )

        if new_quantity > current:
            self._check_stock(product_id, package_option_id, current, new_quantity - current)

        cart = self._cart.copy()
        cart.set_quantity(product_id, package_option_id, new_quantity)
        self._commit(cart)

    def remove_from_cart(self, product_id: str, package_option_id: str) -> None:
        cart = self._cart.copy()
        cart.remove(product_id, package_option_id)
        self._commit(cart)

    # --- Gifts ----------------------------------------------------------------

    def add_gift_to_cart(self, gift: GiftLineItem) -> None:
        cart = self._cart.copy()
        cart.put_gift(gift)
        self._commit(cart)

    def remove_gift_from_cart(self, gift_id: str) -> None:
        cart = self._cart.copy()
        cart.remove_gift(gift_id)
        self._commit(cart)

    def clear_cart(self) -> None:
        self._storage.delete(CART_STORAGE_KEY)
        self._cart.clear()

    # --- Internal helpers -----------------------------------------------------

    def _check_stock(
        self, product_id: str, package_option_id: str, held: int, requested: int
    ) -> None:
        snapshot = self._stock_oracle.query(product_id, package_option_id)
        try:
            ensure_stock_available(snapshot, held, requested)
        except DomainException as exc:
            logger.info(
                "Stock check rejected %s/%s (held=%d, requested=%d): %s",
                product_id, package_option_id, held, requested, exc.reason,
            )
            raise

    def _commit(self, cart: Cart) -> None:
        self._storage.set(CART_STORAGE_KEY, json.dumps(_cart_to_raw(cart)))
        self._cart = cart

    def _load(self) -> Cart:
        try:
            raw = self._storage.get(CART_STORAGE_KEY)
        except StorageError:
            logger.warning("Could not read stored cart; starting empty", exc_info=True)
            return Cart()
        if raw is None:
            return Cart()

        try:
            return _cart_from_raw(json.loads(raw))
        except (
            ValueError, TypeError, KeyError, AttributeError, ArithmeticError, DomainException,
        ) as exc:
            logger.warning("Discarding malformed stored cart: %s", exc)
            return Cart()


# --- Serialization ------------------------------------------------------------


def _cart_to_raw(cart: Cart) -> dict[str, Any]:
    return {
        "cart": [
            {
                "productId": line.product_id,
                "packageOptionId": line.package_option_id,
                "quantity": line.quantity.value,
            }
            for line in cart.lines
        ],
        "gifts": [
            {
                "id": gift.id,
                "name": gift.name,
                "price": str(gift.price.amount),
                "currency": gift.price.currency,
                "quantity": gift.quantity.value,
                "recipientDetails": gift.recipient_details,
            }
            for gift in cart.gifts
        ],
    }


def _cart_from_raw(data: Any) -> Cart:
    if not isinstance(data, dict):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    lines = data.get("cart", [])
    gifts = data.get("gifts", [])
    if not isinstance(lines, list) or not isinstance(gifts, list):
        raise TypeError("cart and gifts must be lists")

    cart = Cart()
    for entry in lines:
        cart.add(str(entry["productId"]), str(entry["packageOptionId"]), entry["quantity"])
    for entry in gifts:
        details = entry.get("recipientDetails")
        if details is not None and not isinstance(details, dict):
            raise TypeError("recipientDetails must be an object")
        cart.put_gift(
            GiftLineItem(
                id=str(entry["id"]),
                name=str(entry["name"]),
                price=Money(Decimal(str(entry["price"])), entry.get("currency", "EUR")),
                quantity=Quantity(entry["quantity"]),
                recipient_details=details,
            )
        )
    return cart
