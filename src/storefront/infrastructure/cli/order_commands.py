"""CLI commands for placed orders."""

from __future__ import annotations

import click

from storefront.application.dto import OrderDTO
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import order_store
from storefront.infrastructure.cli.formatting import display_order, domain_error


@click.command("show")
@click.option("--number", "order_number", required=True, type=int, help="Order number.")
def order_show(order_number: int) -> None:
    """Show details of a placed order."""
    handler = ShowOrderHandler(order_store=order_store())

    try:
        dto = handler.handle(order_number)
    except DomainException as exc:
        raise domain_error(exc)

    display_order(dto)


@click.command("list")
def order_list() -> None:
    """List placed orders."""
    orders = [OrderDTO.from_order(o) for o in order_store().list_all()]

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'#':>6}  {'Created':<20} {'Payment':<16} {'Items':>5} {'Total':>10}")
    click.echo("-" * 63)
    for dto in orders:
        click.echo(
            f"{dto.order_number:>6}  {dto.created_at:<20} {dto.payment_method:<16} "
            f"{len(dto.items):>5} {dto.totals.total:>10}"
        )
