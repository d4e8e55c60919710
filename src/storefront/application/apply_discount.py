"""Application service: Apply Discount use case.

A code is validated against the current subtotal exactly once. A valid
code replaces whatever discount the session had, so at most one
discount is ever applied.
"""

from __future__ import annotations

import logging

from storefront.application.quote_cart import QuoteCartHandler
from storefront.domain.exceptions import InvalidDiscount
from storefront.domain.model.cart import CartSnapshot
from storefront.domain.model.checkout import CheckoutSession
from storefront.domain.model.discount import DiscountCode
from storefront.domain.port.discount_validator import DiscountValidator

logger = logging.getLogger(__name__)

_REJECTION_MESSAGES = {
    "invalid_code": "Invalid discount code",
    "expired": "This discount code has expired",
    "max_uses_reached": "This discount code has reached its usage limit",
    "min_order_not_met": "Your order does not reach the minimum amount for this code",
}


class ApplyDiscountHandler:

    def __init__(
        self,
        quote_handler: QuoteCartHandler,
        validator: DiscountValidator,
    ) -> None:
        self._quote_handler = quote_handler
        self._validator = validator

    def handle(self, session: CheckoutSession, code: str, cart: CartSnapshot) -> DiscountCode:
        normalized = code.strip().upper()
        if not normalized:
            raise InvalidDiscount("Please enter a discount code", reason="invalid_code")

        # Subtotal is discount-independent, so quote without the session.
        subtotal = self._quote_handler.handle(cart).totals.subtotal
        result = self._validator.validate(normalized, subtotal)

        if not result.valid or result.discount is None:
            reason = result.reason or "invalid_code"
            logger.info("Discount code %s rejected: %s", normalized, reason)
            raise InvalidDiscount(
                _REJECTION_MESSAGES.get(reason, "Invalid discount code"), reason=reason
            )

        session.applied_discount = result.discount
        logger.info("Discount code %s applied to session %s", normalized, session.id)
        return result.discount

    def remove(self, session: CheckoutSession) -> None:
        session.applied_discount = None
