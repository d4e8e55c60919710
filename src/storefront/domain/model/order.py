"""Order aggregate: the immutable record of a placed checkout.

An Order is created exactly once by the submission use case and is
never mutated by this core afterwards. Line items capture the price
snapshot at submission time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.checkout import GiftSelection
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.pricing import PricedLine, Totals
from storefront.domain.model.profile import ShippingAddress
from storefront.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a package option at submission time."""

    product_id: str
    package_option_id: str
    product_name: str
    package_description: str
    quantity: Quantity
    unit_price: Money  # locked at submission time
    is_gift: bool = False
    gift_details: dict | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @staticmethod
    def from_priced(line: PricedLine) -> OrderLineItem:
        return OrderLineItem(
            product_id=line.product_id,
            package_option_id=line.package_option_id,
            product_name=line.name,
            package_description=line.description,
            quantity=Quantity(line.quantity),
            unit_price=line.unit_price,
            is_gift=line.is_gift,
            gift_details=line.gift_details,
        )


@dataclass(frozen=True)
class InsertedOrder:
    """What the order store hands back after an insert."""

    id: str
    order_number: int


@dataclass(frozen=True)
class Order:
    """Aggregate root for placed orders.

    Use the ``Order.create()`` factory for new orders. It enforces the
    invariants. The ``__init__`` is intentionally simple so the store can
    reconstitute persisted orders without re-validating.
    """

    id: str | None
    order_number: int
    profile_id: str
    items: tuple[OrderLineItem, ...]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    totals: Totals
    is_guest: bool
    idempotency_key: str
    payment_reference: str | None = None
    discount_code: str | None = None
    gift: GiftSelection = field(default_factory=GiftSelection)
    notes: str = ""
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        *,
        order_number: int,
        profile_id: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        totals: Totals,
        is_guest: bool,
        idempotency_key: str,
        payment_reference: str | None = None,
        discount_code: str | None = None,
        gift: GiftSelection | None = None,
        notes: str = "",
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        if order_number <= 0:
            raise ValidationError("Order number must be positive")
        if payment_method is PaymentMethod.CREDIT_CARD and not payment_reference:
            raise ValidationError("Card orders require a captured payment reference")

        return Order(
            id=None,
            order_number=order_number,
            profile_id=profile_id,
            items=tuple(items),
            shipping_address=shipping_address,
            payment_method=payment_method,
            totals=totals,
            is_guest=is_guest,
            idempotency_key=idempotency_key,
            payment_reference=payment_reference,
            discount_code=discount_code,
            gift=gift or GiftSelection(),
            notes=notes.strip(),
        )

    # --- Computed properties --------------------------------------------------

    @property
    def discount_amount(self) -> Money:
        return self.totals.discount_amount

    @property
    def total(self) -> Money:
        return self.totals.total
