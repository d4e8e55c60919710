"""Domain service: the stock gate for cart quantity increases.

A single pre-condition used by every call site that would raise the
quantity held for a variant. The check is advisory: it reads stock and
decides, with no lock across sessions. The authoritative decrement
happens at fulfillment time, outside this core.
"""

from __future__ import annotations

from storefront.domain.exceptions import InsufficientStock, ProductUnavailable
from storefront.domain.model.stock import StockSnapshot


def ensure_stock_available(
    snapshot: StockSnapshot | None,
    held: int,
    requested: int,
) -> None:
    """Raise unless ``held + requested`` units can be sold.

    Args:
        snapshot: The oracle's answer; None means the variant is unknown.
        held: Quantity of this variant already in the cart.
        requested: Additional quantity being asked for (a delta).
    """
    if snapshot is None:
        raise ProductUnavailable("This product option does not exist")
    if not snapshot.is_active:
        raise ProductUnavailable("This product option is not available")

    if held + requested > snapshot.available_quantity:
        detail = f" ({held} already in your cart)" if held > 0 else ""
        raise InsufficientStock(
            f"Only {snapshot.available_quantity} items available in stock{detail}",
            available=snapshot.available_quantity,
            in_cart=held,
        )
