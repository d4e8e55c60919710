"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from storefront.infrastructure.bootstrap import product_repository


@click.command("list")
def product_list() -> None:
    """List all products and their package options."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<8} {'Name':<24} {'Option':<8} {'Package':<14} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 75)
    for p in products:
        for opt in p.package_options:
            status = "" if opt.is_active else "  (inactive)"
            click.echo(
                f"{p.id:<8} {p.name:<24} {opt.id:<8} {opt.description:<14} "
                f"{str(opt.price):>10} {p.stock_quantity:>6}{status}"
            )
