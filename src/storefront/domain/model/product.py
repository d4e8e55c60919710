"""Product aggregate.

Products live independently of carts and orders. A product is sold
through one or more package options (size/weight variants), each with
its own price. Stock is tracked per product, not per package option.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class PackageOption:
    """A purchasable variant of a product."""

    id: str
    description: str
    price: Money
    is_active: bool = True


@dataclass
class Product:
    """A product in the catalog.

    This is an aggregate root and the entry point for any
    operation involving a product or one of its package options.
    """

    id: str
    name: str
    stock_quantity: int
    package_options: list[PackageOption] = field(default_factory=list)

    def package_option(self, package_option_id: str) -> PackageOption | None:
        for option in self.package_options:
            if option.id == package_option_id:
                return option
        return None


@dataclass(frozen=True)
class GiftOption:
    """Optional gift packaging that can be attached to an order."""

    id: str
    name: str
    price: Money
