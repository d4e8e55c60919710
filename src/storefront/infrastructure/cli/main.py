import logging

import click

from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_gift_add,
    cart_gift_remove,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import checkout_guest
from storefront.infrastructure.cli.order_commands import order_list, order_show
from storefront.infrastructure.cli.product_commands import product_list
from storefront.infrastructure.logging_config import configure_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at DEBUG level.")
def cli(verbose: bool) -> None:
    """Storefront: cart and checkout"""
    s = settings()
    configure_logging(logging.DEBUG if verbose else s.log_level, s.log_format)


@cli.group()
def product() -> None:
    """Browse the catalog."""


@cli.group()
def cart() -> None:
    """Manage the cart."""


@cli.group()
def checkout() -> None:
    """Check out the cart."""


@cli.group()
def order() -> None:
    """Inspect placed orders."""


# Register subcommands
product.add_command(product_list)
cart.add_command(cart_add)
cart.add_command(cart_update)
cart.add_command(cart_remove)
cart.add_command(cart_gift_add)
cart.add_command(cart_gift_remove)
cart.add_command(cart_show)
cart.add_command(cart_clear)
checkout.add_command(checkout_guest)
order.add_command(order_show)
order.add_command(order_list)
