"""Cart aggregate: the shopper's line items and gift add-ons.

The Cart itself knows nothing about stock; quantity increases are gated
by the application layer (CartStore) before they reach the aggregate.
The aggregate only guarantees line uniqueness and positive quantities.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class CartLineItem:
    """One product variant in the cart. Unique per (product, package)."""

    product_id: str
    package_option_id: str
    quantity: Quantity

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.package_option_id)


@dataclass(frozen=True)
class GiftLineItem:
    """A gift add-on priced on its own. Unique per ``id``."""

    id: str
    name: str
    price: Money
    quantity: Quantity
    recipient_details: dict[str, Any] | None = None


@dataclass(frozen=True)
class CartSnapshot:
    """Immutable view of a cart, handed to pricing and submission."""

    lines: tuple[CartLineItem, ...] = ()
    gifts: tuple[GiftLineItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.gifts


@dataclass
class Cart:

    lines: list[CartLineItem] = field(default_factory=list)
    gifts: list[GiftLineItem] = field(default_factory=list)

    # --- Queries --------------------------------------------------------------

    def quantity_of(self, product_id: str, package_option_id: str) -> int:
        line = self._find_line(product_id, package_option_id)
        return line.quantity.value if line else 0

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(lines=tuple(self.lines), gifts=tuple(self.gifts))

    def copy(self) -> Cart:
        return Cart(lines=list(self.lines), gifts=list(self.gifts))

    # --- Mutations ------------------------------------------------------------

    def add(self, product_id: str, package_option_id: str, quantity: int) -> CartLineItem:
        """Merge into an existing line (sum quantities) or append a new one."""
        existing = self._find_line(product_id, package_option_id)
        if existing is None:
            line = CartLineItem(product_id, package_option_id, Quantity(quantity))
            self.lines.append(line)
            return line

        merged = replace(existing, quantity=Quantity(existing.quantity.value + quantity))
        self.lines[self.lines.index(existing)] = merged
        return merged

    def set_quantity(self, product_id: str, package_option_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        existing = self._find_line(product_id, package_option_id)
        if existing is None:
            raise EntityNotFoundError(
                f"Item {product_id}/{package_option_id} not found in cart"
            )
        if quantity <= 0:
            self.lines.remove(existing)
            return
        self.lines[self.lines.index(existing)] = replace(existing, quantity=Quantity(quantity))

    def remove(self, product_id: str, package_option_id: str) -> None:
        self.lines = [
            line for line in self.lines
            if line.key != (product_id, package_option_id)
        ]

    def put_gift(self, gift: GiftLineItem) -> None:
        """Add a gift, replacing any gift with the same id in place."""
        for i, existing in enumerate(self.gifts):
            if existing.id == gift.id:
                self.gifts[i] = gift
                return
        self.gifts.append(gift)

    def remove_gift(self, gift_id: str) -> None:
        self.gifts = [gift for gift in self.gifts if gift.id != gift_id]

    def clear(self) -> None:
        self.lines = []
        self.gifts = []

    # --- Internal helpers -----------------------------------------------------

    def _find_line(self, product_id: str, package_option_id: str) -> CartLineItem | None:
        for line in self.lines:
            if line.key == (product_id, package_option_id):
                return line
        return None
