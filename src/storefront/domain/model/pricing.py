"""Inputs and outputs of the pricing computation."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class ShippingConfig:
    flat_cost: Money
    free_threshold: Money


@dataclass(frozen=True)
class PricedLine:
    """A cart or gift line with its resolved unit price."""

    product_id: str
    package_option_id: str
    name: str
    description: str
    quantity: int
    unit_price: Money
    is_gift: bool = False
    gift_details: dict | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Totals:
    subtotal: Money
    discount_amount: Money
    subtotal_after_discount: Money
    shipping_cost: Money
    gift_option_cost: Money
    gift_product_cost: Money
    total: Money

    @property
    def has_free_shipping(self) -> bool:
        return self.shipping_cost.amount == 0
