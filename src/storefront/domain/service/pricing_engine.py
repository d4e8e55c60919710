"""Domain service: the pricing computation.

This is the only place totals are computed. The figure shown to the
shopper and the figure persisted with the order both come from
``PricingEngine.compute`` on the same inputs, so they cannot drift.

The function is pure: no I/O, no clock, no hidden state.
"""

from __future__ import annotations

from collections.abc import Iterable

from storefront.domain.model.discount import DiscountCode
from storefront.domain.model.pricing import PricedLine, ShippingConfig, Totals
from storefront.domain.model.value_objects import Money


class PricingEngine:

    def __init__(self, shipping: ShippingConfig) -> None:
        self._shipping = shipping

    @property
    def currency(self) -> str:
        return self._shipping.flat_cost.currency

    def compute(
        self,
        cart_lines: Iterable[PricedLine],
        gift_lines: Iterable[PricedLine] = (),
        discount: DiscountCode | None = None,
        gift_option_cost: Money | None = None,
        gift_product_cost: Money | None = None,
    ) -> Totals:
        """Compute the total breakdown, in this exact order:

        1. subtotal over all cart and gift lines
        2. discount (0 unless applied and the minimum order is met)
        3. subtotal after discount, clamped at zero
        4. shipping: free at or above the threshold, else the flat cost
        5. total = step 3 + shipping + gift option + gift product
        """
        zero = Money.zero(self.currency)
        gift_option_cost = gift_option_cost or zero
        gift_product_cost = gift_product_cost or zero

        subtotal = zero
        for line in [*cart_lines, *gift_lines]:
            subtotal = subtotal + line.line_total

        discount_amount = zero
        if discount is not None and discount.applies_to(subtotal):
            discount_amount = discount.amount_for(subtotal)

        subtotal_after_discount = subtotal.minus_floor_zero(discount_amount)

        if subtotal_after_discount >= self._shipping.free_threshold:
            shipping_cost = zero
        else:
            shipping_cost = self._shipping.flat_cost

        total = subtotal_after_discount + shipping_cost + gift_option_cost + gift_product_cost

        return Totals(
            subtotal=subtotal,
            discount_amount=discount_amount,
            subtotal_after_discount=subtotal_after_discount,
            shipping_cost=shipping_cost,
            gift_option_cost=gift_option_cost,
            gift_product_cost=gift_product_cost,
            total=total,
        )
