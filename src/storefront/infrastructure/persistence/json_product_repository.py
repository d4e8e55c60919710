"""JSON-file-backed catalog: products with package options, and gift options."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from storefront.domain.model.product import GiftOption, PackageOption, Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import (
    GiftOptionRepository,
    ProductRepository,
)
from storefront.infrastructure.persistence.json_file import ensure_file, read_json, write_json


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_file(self._file_path, [])

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        products = self._load()
        products[product.id] = product
        self._persist(products)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {
            str(item["id"]): Product(
                id=str(item["id"]),
                name=item["name"],
                stock_quantity=int(item.get("stock_quantity", 0)),
                package_options=[
                    PackageOption(
                        id=str(opt["id"]),
                        description=opt.get("description", ""),
                        price=Money(Decimal(str(opt["price"])), opt.get("currency", "EUR")),
                        is_active=opt.get("is_active", True),
                    )
                    for opt in item.get("package_options", [])
                ],
            )
            for item in read_json(self._file_path)
        }

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [
            {
                "id": p.id,
                "name": p.name,
                "stock_quantity": p.stock_quantity,
                "package_options": [
                    {
                        "id": opt.id,
                        "description": opt.description,
                        "price": str(opt.price.amount),
                        "currency": opt.price.currency,
                        "is_active": opt.is_active,
                    }
                    for opt in p.package_options
                ],
            }
            for p in products.values()
        ]
        write_json(self._file_path, raw)


class JsonGiftOptionRepository(GiftOptionRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_file(self._file_path, [])

    def get_by_id(self, gift_option_id: str) -> GiftOption | None:
        for option in self.list_all():
            if option.id == gift_option_id:
                return option
        return None

    def list_all(self) -> list[GiftOption]:
        return [
            GiftOption(
                id=str(item["id"]),
                name=item["name"],
                price=Money(Decimal(str(item["price"])), item.get("currency", "EUR")),
            )
            for item in read_json(self._file_path)
        ]
