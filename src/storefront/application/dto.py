"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world. Money is pre-formatted
for display.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.application.quote_cart import Quote
from storefront.domain.model.order import Order
from storefront.domain.model.pricing import Totals


@dataclass(frozen=True)
class LineItemDTO:
    """Output: a single priced line as displayed to the user."""

    product_name: str
    package_description: str
    quantity: int
    unit_price: str  # formatted, e.g. "€12.00"
    line_total: str
    is_gift: bool = False


@dataclass(frozen=True)
class TotalsDTO:

    subtotal: str
    discount_amount: str
    subtotal_after_discount: str
    shipping_cost: str
    gift_option_cost: str
    gift_product_cost: str
    total: str
    free_shipping: bool
    has_discount: bool

    @staticmethod
    def from_totals(totals: Totals) -> TotalsDTO:
        return TotalsDTO(
            subtotal=str(totals.subtotal),
            discount_amount=str(totals.discount_amount),
            subtotal_after_discount=str(totals.subtotal_after_discount),
            shipping_cost=str(totals.shipping_cost),
            gift_option_cost=str(totals.gift_option_cost),
            gift_product_cost=str(totals.gift_product_cost),
            total=str(totals.total),
            free_shipping=totals.has_free_shipping,
            has_discount=totals.discount_amount.amount > 0,
        )


@dataclass(frozen=True)
class QuoteDTO:
    """Output: the cart as priced right now."""

    items: list[LineItemDTO]
    totals: TotalsDTO

    @staticmethod
    def from_quote(quote: Quote) -> QuoteDTO:
        return QuoteDTO(
            items=[
                LineItemDTO(
                    product_name=line.name,
                    package_description=line.description,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                    is_gift=line.is_gift,
                )
                for line in quote.lines
            ],
            totals=TotalsDTO.from_totals(quote.totals),
        )


@dataclass(frozen=True)
class OrderDTO:
    """Output: a placed order as displayed to the user."""

    order_number: int
    status: str
    profile_id: str
    is_guest: bool
    payment_method: str
    payment_reference: str | None
    discount_code: str | None
    shipping_address: str
    items: list[LineItemDTO]
    totals: TotalsDTO
    notes: str
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        address = order.shipping_address
        return OrderDTO(
            order_number=order.order_number,
            status=order.status.value,
            profile_id=order.profile_id,
            is_guest=order.is_guest,
            payment_method=order.payment_method.value,
            payment_reference=order.payment_reference,
            discount_code=order.discount_code,
            shipping_address=(
                f"{address.address}, {address.postal_code} {address.city}, {address.country}"
            ),
            items=[
                LineItemDTO(
                    product_name=item.product_name,
                    package_description=item.package_description,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                    is_gift=item.is_gift,
                )
                for item in order.items
            ],
            totals=TotalsDTO.from_totals(order.totals),
            notes=order.notes,
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )
