"""Application service: Prepare Card Payment use case.

Creates a payment intent for the quoted total and records it on the
session so OrderSubmitter can confirm it later.
"""

from __future__ import annotations

import logging

from storefront.application.quote_cart import QuoteCartHandler
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartSnapshot
from storefront.domain.model.checkout import CheckoutSession
from storefront.domain.model.payment import PaymentIntent, PaymentMethod, PaymentState
from storefront.domain.port.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class PrepareCardPaymentHandler:

    def __init__(
        self,
        quote_handler: QuoteCartHandler,
        gateway: PaymentGateway,
    ) -> None:
        self._quote_handler = quote_handler
        self._gateway = gateway

    def handle(
        self,
        session: CheckoutSession,
        cart: CartSnapshot,
        payment_method_ref: str | None = None,
    ) -> PaymentIntent:
        if session.payment.is_captured:
            raise ValidationError(
                "Payment for this checkout was already captured",
                reason="payment_already_captured",
            )
        if cart.is_empty:
            raise ValidationError("Your cart is empty", reason="cart_empty")

        totals = self._quote_handler.handle(cart, session).totals
        intent = self._gateway.create_intent(totals.total, order_ref=session.id)

        session.payment_method = PaymentMethod.CREDIT_CARD
        session.payment = PaymentState(
            client_secret=intent.client_secret,
            amount=totals.total,
            method_ref=payment_method_ref,
        )
        logger.info("Payment intent created for session %s (%s)", session.id, totals.total)
        return intent
