"""Shared output helpers for CLI commands."""

from __future__ import annotations

import click

from storefront.application.dto import LineItemDTO, OrderDTO, TotalsDTO
from storefront.domain.exceptions import DomainException, FieldValidationError, SubmissionFailed


def domain_error(exc: DomainException) -> click.ClickException:
    """Translate a domain error into a CLI error carrying its reason code."""
    lines = [f"{exc} [{exc.reason}]"]
    if isinstance(exc, FieldValidationError):
        lines += [f"  {name}: {message}" for name, message in sorted(exc.errors.items())]
    if isinstance(exc, SubmissionFailed) and exc.payment_reference:
        lines.append(f"  payment reference: {exc.payment_reference}")
    return click.ClickException("\n".join(lines))


def display_items(items: list[LineItemDTO]) -> None:
    click.echo(f"  {'Product':<24} {'Package':<14} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*67}")
    for item in items:
        name = f"{item.product_name} (gift)" if item.is_gift else item.product_name
        click.echo(
            f"  {name:<24} {item.package_description:<14} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*67}")


def display_totals(totals: TotalsDTO) -> None:
    rows = [("Subtotal", totals.subtotal)]
    if totals.has_discount:
        rows.append(("Discount", f"-{totals.discount_amount}"))
    rows.append(("Shipping", "FREE" if totals.free_shipping else totals.shipping_cost))
    rows.append(("Gift packaging", totals.gift_option_cost))
    rows.append(("Gift product", totals.gift_product_cost))
    for label, value in rows:
        click.echo(f"  {label:<44} {value:>22}")
    click.echo(f"  {'Total':<44} {totals.total:>22}")


def display_order(dto: OrderDTO) -> None:
    click.echo(f"Order #{dto.order_number}  (status={dto.status})")
    click.echo(f"Customer: {dto.profile_id}{' (guest)' if dto.is_guest else ''}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Payment:  {dto.payment_method}")
    if dto.payment_reference:
        click.echo(f"Payment reference: {dto.payment_reference}")
    if dto.discount_code:
        click.echo(f"Discount code: {dto.discount_code}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    display_items(dto.items)
    display_totals(dto.totals)
    if dto.notes:
        click.echo()
        click.echo(f"Notes: {dto.notes}")
