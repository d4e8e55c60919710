"""Abstract repository for discount codes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.discount import DiscountCode


class DiscountRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> DiscountCode | None:
        """Return the discount with this (normalized) code, or None."""
