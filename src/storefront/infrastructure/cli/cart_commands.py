"""CLI commands for the shopper's cart."""

from __future__ import annotations

import json

import click

from storefront.application.dto import QuoteDTO
from storefront.domain.exceptions import DomainException
from storefront.domain.model.cart import CartLineItem, GiftLineItem
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.bootstrap import cart_store, quote_handler, settings
from storefront.infrastructure.cli.formatting import display_items, display_totals, domain_error


def _announce(line: CartLineItem) -> None:
    click.echo(
        f"Cart now holds {line.quantity} x {line.product_id}/{line.package_option_id}"
    )


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--option", "package_option_id", required=True, help="Package option ID.")
@click.option("--qty", "quantity", default=1, show_default=True, type=int, help="Quantity to add.")
def cart_add(product_id: str, package_option_id: str, quantity: int) -> None:
    """Add a product variant to the cart."""
    store = cart_store(on_item_added=_announce)

    try:
        store.add_to_cart(product_id, package_option_id, quantity)
    except DomainException as exc:
        raise domain_error(exc)


@click.command("update")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--option", "package_option_id", required=True, help="Package option ID.")
@click.option("--qty", "quantity", required=True, type=int, help="New quantity (0 removes).")
def cart_update(product_id: str, package_option_id: str, quantity: int) -> None:
    """Set the quantity of a cart line."""
    store = cart_store()

    try:
        store.update_quantity(product_id, package_option_id, quantity)
    except DomainException as exc:
        raise domain_error(exc)

    if quantity <= 0:
        click.echo(f"Removed {product_id}/{package_option_id} from cart")
    else:
        click.echo(f"Cart now holds {quantity} x {product_id}/{package_option_id}")


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--option", "package_option_id", required=True, help="Package option ID.")
def cart_remove(product_id: str, package_option_id: str) -> None:
    """Remove a line from the cart."""
    cart_store().remove_from_cart(product_id, package_option_id)
    click.echo(f"Removed {product_id}/{package_option_id} from cart")


@click.command("gift-add")
@click.option("--id", "gift_id", required=True, help="Gift ID.")
@click.option("--name", required=True, help="Gift name.")
@click.option("--price", required=True, help="Gift price (e.g. 12.50).")
@click.option("--qty", "quantity", default=1, show_default=True, type=int)
@click.option("--recipient", default=None, help="Recipient details as a JSON object.")
def cart_gift_add(
    gift_id: str, name: str, price: str, quantity: int, recipient: str | None
) -> None:
    """Add a gift (or replace the gift with the same ID)."""
    details = None
    if recipient:
        try:
            details = json.loads(recipient)
        except ValueError:
            raise click.BadParameter("must be a JSON object", param_hint="--recipient")
        if not isinstance(details, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--recipient")

    try:
        gift = GiftLineItem(
            id=gift_id,
            name=name,
            price=Money.of(price, settings().currency),
            quantity=Quantity(quantity),
            recipient_details=details,
        )
        cart_store().add_gift_to_cart(gift)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Gift '{name}' added to cart")


@click.command("gift-remove")
@click.option("--id", "gift_id", required=True, help="Gift ID.")
def cart_gift_remove(gift_id: str) -> None:
    """Remove a gift from the cart."""
    cart_store().remove_gift_from_cart(gift_id)
    click.echo(f"Gift {gift_id} removed from cart")


@click.command("show")
def cart_show() -> None:
    """Show the cart with current prices and totals."""
    snapshot = cart_store().snapshot()
    if snapshot.is_empty:
        click.echo("Your cart is empty.")
        return

    try:
        dto = QuoteDTO.from_quote(quote_handler().handle(snapshot))
    except DomainException as exc:
        raise domain_error(exc)

    display_items(dto.items)
    display_totals(dto.totals)


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    cart_store().clear_cart()
    click.echo("Cart cleared")
