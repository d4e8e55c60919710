"""Port: validation of a discount code against the current subtotal."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.discount import DiscountValidation
from storefront.domain.model.value_objects import Money


class DiscountValidator(ABC):

    @abstractmethod
    def validate(self, code: str, subtotal: Money) -> DiscountValidation:
        """Check expiry, usage and minimum-order rules for ``code``."""
