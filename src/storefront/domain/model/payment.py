"""Payment methods and the payment-intent lifecycle as seen by checkout."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.domain.model.value_objects import Money


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    PAY_ON_DELIVERY = "pay_on_delivery"


class PaymentStatus(Enum):
    SUCCEEDED = "succeeded"
    REQUIRES_ACTION = "requires_action"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentIntent:
    client_secret: str


@dataclass(frozen=True)
class PaymentConfirmation:
    """Answer of one confirmation round; ``id`` is the payment reference."""

    status: PaymentStatus
    id: str | None = None


@dataclass
class PaymentState:
    """Card payment progress kept on the checkout session.

    ``reference`` is only set once a confirmation has succeeded; after
    that it is never cleared, so a retried submission reuses it instead
    of charging the shopper again. ``amount`` is the total the intent was
    created for.
    """

    client_secret: str | None = None
    amount: Money | None = None
    method_ref: str | None = None
    status: PaymentStatus | None = None
    reference: str | None = None

    @property
    def is_captured(self) -> bool:
        return self.status is PaymentStatus.SUCCEEDED and self.reference is not None
