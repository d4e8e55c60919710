"""StockOracle answered from the product catalog.

Stock is tracked per product; activity per package option.
"""

from __future__ import annotations

from storefront.domain.model.stock import StockSnapshot
from storefront.domain.port.stock_oracle import StockOracle
from storefront.domain.repository.product_repository import ProductRepository


class CatalogStockOracle(StockOracle):

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def query(self, product_id: str, package_option_id: str) -> StockSnapshot | None:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            return None
        option = product.package_option(package_option_id)
        if option is None:
            return None
        return StockSnapshot(
            available_quantity=max(0, product.stock_quantity),
            is_active=option.is_active,
        )
