"""Port: stock and activity answers for product variants."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.stock import StockSnapshot


class StockOracle(ABC):

    @abstractmethod
    def query(self, product_id: str, package_option_id: str) -> StockSnapshot | None:
        """Return current stock for a variant, or None if it does not exist."""
