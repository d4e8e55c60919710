"""Port: the card payment provider."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.payment import PaymentConfirmation, PaymentIntent
from storefront.domain.model.value_objects import Money


class PaymentGateway(ABC):

    @abstractmethod
    def create_intent(self, amount: Money, order_ref: str) -> PaymentIntent:
        """Create a payment intent for ``amount`` (currency taken from it)."""

    @abstractmethod
    def confirm(
        self, client_secret: str, method: str | None, timeout: float
    ) -> PaymentConfirmation:
        """Run one confirmation round for an intent.

        Raises:
            TimeoutError: if the provider did not answer within ``timeout``.
            PaymentGatewayError: on transport or protocol failures.
        """
