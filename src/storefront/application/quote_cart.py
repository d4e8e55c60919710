"""Application service: Quote Cart use case.

Resolves catalog prices for a cart snapshot and the session's gift
selections, then hands everything to the PricingEngine. Both the total
shown to the shopper and the total persisted with an order come from
here.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ProductUnavailable
from storefront.domain.model.cart import CartSnapshot, GiftLineItem
from storefront.domain.model.checkout import CheckoutSession, GiftSelection
from storefront.domain.model.pricing import PricedLine, Totals
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import (
    GiftOptionRepository,
    ProductRepository,
)
from storefront.domain.service.pricing_engine import PricingEngine

GIFT_PACKAGE_ID = "gift"


@dataclass(frozen=True)
class Quote:
    """Priced lines (cart lines first, then gifts) and their totals."""

    lines: tuple[PricedLine, ...]
    totals: Totals

    @property
    def cart_lines(self) -> tuple[PricedLine, ...]:
        return tuple(line for line in self.lines if not line.is_gift)

    @property
    def gift_lines(self) -> tuple[PricedLine, ...]:
        return tuple(line for line in self.lines if line.is_gift)


class QuoteCartHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        gift_option_repo: GiftOptionRepository,
        pricing_engine: PricingEngine,
    ) -> None:
        self._product_repo = product_repo
        self._gift_option_repo = gift_option_repo
        self._pricing = pricing_engine

    def handle(self, cart: CartSnapshot, session: CheckoutSession | None = None) -> Quote:
        cart_lines = [
            self._price_line(line.product_id, line.package_option_id, line.quantity.value)
            for line in cart.lines
        ]
        gift_lines = [self._price_gift(gift) for gift in cart.gifts]

        discount = None
        gift_option_cost = gift_product_cost = None
        if session is not None:
            discount = session.applied_discount
            gift_option_cost = self._gift_option_cost(session.gift_selections)
            gift_product_cost = self._gift_product_cost(session.gift_selections)

        totals = self._pricing.compute(
            cart_lines,
            gift_lines,
            discount=discount,
            gift_option_cost=gift_option_cost,
            gift_product_cost=gift_product_cost,
        )
        return Quote(lines=tuple(cart_lines + gift_lines), totals=totals)

    # --- Internal helpers -----------------------------------------------------

    def _price_line(self, product_id: str, package_option_id: str, quantity: int) -> PricedLine:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise ProductUnavailable(f"Product '{product_id}' no longer exists")
        option = product.package_option(package_option_id)
        if option is None:
            raise ProductUnavailable(
                f"Package option '{package_option_id}' of '{product.name}' no longer exists"
            )
        return PricedLine(
            product_id=product.id,
            package_option_id=option.id,
            name=product.name,
            description=option.description,
            quantity=quantity,
            unit_price=option.price,
        )

    @staticmethod
    def _price_gift(gift: GiftLineItem) -> PricedLine:
        return PricedLine(
            product_id=gift.id,
            package_option_id=GIFT_PACKAGE_ID,
            name=gift.name,
            description=f"Gift package: {gift.name}",
            quantity=gift.quantity.value,
            unit_price=gift.price,
            is_gift=True,
            gift_details=gift.recipient_details,
        )

    def _gift_option_cost(self, selection: GiftSelection) -> Money | None:
        if selection.gift_option_id is None:
            return None
        option = self._gift_option_repo.get_by_id(selection.gift_option_id)
        if option is None:
            raise ProductUnavailable(f"Gift option '{selection.gift_option_id}' does not exist")
        return option.price

    def _gift_product_cost(self, selection: GiftSelection) -> Money | None:
        if selection.gift_product_id is None:
            return None
        if selection.gift_product_package_id is None:
            raise ProductUnavailable("A gift product needs a package option")
        line = self._price_line(selection.gift_product_id, selection.gift_product_package_id, 1)
        return line.unit_price
