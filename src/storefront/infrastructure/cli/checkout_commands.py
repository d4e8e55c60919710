"""CLI commands for checkout.

The CLI has no login backend, so ``checkout guest`` runs a whole guest
checkout in one go: fill the form, apply a discount, choose gifts and a
payment method, then submit the current cart.
"""

from __future__ import annotations

import click

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import DomainException
from storefront.domain.model.checkout import DEFAULT_COUNTRY, GiftSelection
from storefront.domain.model.payment import PaymentMethod
from storefront.infrastructure.bootstrap import (
    apply_discount_handler,
    cart_store,
    checkout_state_machine,
    order_submitter,
    prepare_card_payment_handler,
)
from storefront.infrastructure.cli.formatting import display_order, domain_error


@click.command("guest")
@click.option("--name", required=True, help="First and last name.")
@click.option("--email", required=True)
@click.option("--phone", required=True)
@click.option("--address", required=True, help="Street and house number.")
@click.option("--city", required=True)
@click.option("--postal-code", required=True)
@click.option("--country", default=DEFAULT_COUNTRY, show_default=True)
@click.option("--notes", default="", help="Delivery notes.")
@click.option(
    "--payment",
    "payment_method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.BANK_TRANSFER.value,
    show_default=True,
)
@click.option("--card-method", default=None, help="Card payment method reference.")
@click.option("--discount", "discount_code", default=None, help="Discount code.")
@click.option("--gift-option", default=None, help="Gift packaging option ID.")
@click.option("--gift-product", default=None, help="Gift product ID.")
@click.option("--gift-package", default=None, help="Package option ID of the gift product.")
@click.option("--gift-message", default="", help="Message for the gift recipient.")
def checkout_guest(
    name: str,
    email: str,
    phone: str,
    address: str,
    city: str,
    postal_code: str,
    country: str,
    notes: str,
    payment_method: str,
    card_method: str | None,
    discount_code: str | None,
    gift_option: str | None,
    gift_product: str | None,
    gift_package: str | None,
    gift_message: str,
) -> None:
    """Place an order for the current cart as a guest."""
    store = cart_store()
    checkout = checkout_state_machine()
    submitter = order_submitter(checkout, store)
    cart = store.snapshot()

    try:
        session = checkout.begin()
        checkout.choose_guest(session)
        checkout.update_fields(
            session,
            name=name,
            email=email,
            phone=phone,
            address=address,
            city=city,
            postal_code=postal_code,
            country=country,
            notes=notes,
        )
        session.gift_selections = GiftSelection(
            gift_option_id=gift_option,
            gift_product_id=gift_product,
            gift_product_package_id=gift_package,
            message=gift_message,
        )
        if discount_code:
            discount = apply_discount_handler().handle(session, discount_code, cart)
            click.echo(f"Discount code {discount.code} applied")

        method = PaymentMethod(payment_method)
        if method is PaymentMethod.CREDIT_CARD:
            card_handler = prepare_card_payment_handler()
            if card_handler is None:
                raise click.ClickException(
                    "Card payments are not configured (set STOREFRONT_PAYMENTS_BASE_URL)"
                )
            card_handler.handle(session, cart, payment_method_ref=card_method)
        session.payment_method = method

        order = submitter.submit(session, cart)
    except DomainException as exc:
        raise domain_error(exc)

    if order is None:
        raise click.ClickException("Order submission is already in progress")
    click.echo("Thank you for your order!")
    click.echo()
    display_order(OrderDTO.from_order(order))
