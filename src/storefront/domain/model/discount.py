"""Discount codes and the eligibility rules attached to them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.model.value_objects import Money


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class DiscountCode:
    """A coupon.

    ``value`` is a percentage (0-100) for PERCENTAGE codes and a currency
    amount for FIXED codes.
    """

    code: str
    type: DiscountType
    value: Decimal
    valid_from: datetime
    valid_until: datetime | None = None
    min_order_amount: Money | None = None
    max_uses: int | None = None
    current_uses: int = 0
    is_active: bool = True

    def applies_to(self, subtotal: Money) -> bool:
        """True when ``subtotal`` reaches the minimum order amount (if any)."""
        if self.min_order_amount is None:
            return True
        return subtotal >= self.min_order_amount

    def amount_for(self, subtotal: Money) -> Money:
        """Discount amount for ``subtotal``, ignoring eligibility.

        May exceed the subtotal for large fixed discounts; callers clamp.
        """
        if self.type is DiscountType.PERCENTAGE:
            return subtotal.percent(self.value)
        return Money(self.value, subtotal.currency)

    def rejection_reason(self, subtotal: Money, now: datetime) -> str | None:
        """Return a reason code if the code cannot be used right now."""
        if not self.is_active:
            return "invalid_code"
        if now < self.valid_from or (self.valid_until is not None and now > self.valid_until):
            return "expired"
        if self.max_uses is not None and self.current_uses >= self.max_uses:
            return "max_uses_reached"
        if not self.applies_to(subtotal):
            return "min_order_not_met"
        return None


@dataclass(frozen=True)
class DiscountValidation:
    """Result of validating a code against a subtotal."""

    valid: bool
    discount: DiscountCode | None = None
    reason: str | None = None
