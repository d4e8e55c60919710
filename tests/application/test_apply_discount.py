"""Tests for the ApplyDiscount use case."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.application.apply_discount import ApplyDiscountHandler
from storefront.application.quote_cart import QuoteCartHandler
from storefront.domain.exceptions import InvalidDiscount
from storefront.domain.model.cart import Cart
from storefront.domain.model.checkout import CheckoutSession
from storefront.domain.model.discount import DiscountCode, DiscountType
from storefront.domain.model.pricing import ShippingConfig
from storefront.domain.model.value_objects import Money
from storefront.domain.service.discount_validator import RepositoryDiscountValidator
from storefront.domain.service.pricing_engine import PricingEngine
from tests.fakes import (
    FakeDiscountRepository,
    FakeGiftOptionRepository,
    FakeProductRepository,
    make_product,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _discount(code: str, value: str, kind=DiscountType.PERCENTAGE, **extra) -> DiscountCode:
    return DiscountCode(
        code=code, type=kind, value=Decimal(value), valid_from=NOW - timedelta(days=1), **extra
    )


def _setup() -> tuple[ApplyDiscountHandler, FakeDiscountRepository]:
    discounts = FakeDiscountRepository([
        _discount("WELCOME10", "10"),
        _discount("MINUS5", "5.00", DiscountType.FIXED, min_order_amount=Money.of("20.00")),
        _discount("OLD", "50", valid_until=NOW - timedelta(hours=1)),
        _discount("USEDUP", "10", max_uses=1, current_uses=1),
    ])
    quote_handler = QuoteCartHandler(
        FakeProductRepository([make_product("1", options=[("p1", "0.5 l", "10.00")])]),
        FakeGiftOptionRepository(),
        PricingEngine(ShippingConfig(Money.of("3.90"), Money.of("30.00"))),
    )
    validator = RepositoryDiscountValidator(discounts, clock=lambda: NOW)
    return ApplyDiscountHandler(quote_handler, validator), discounts


def _cart(qty: int):
    cart = Cart()
    cart.add("1", "p1", qty)
    return cart.snapshot()


class TestApplyDiscount:

    def test_valid_code_is_attached_to_session(self):
        handler, _ = _setup()
        session = CheckoutSession()
        discount = handler.handle(session, " welcome10 ", _cart(1))
        assert discount.code == "WELCOME10"
        assert session.applied_discount is discount

    def test_validator_is_consulted_once(self):
        handler, discounts = _setup()
        handler.handle(CheckoutSession(), "WELCOME10", _cart(1))
        assert discounts.lookups == ["WELCOME10"]

    def test_new_code_replaces_previous(self):
        handler, _ = _setup()
        session = CheckoutSession()
        handler.handle(session, "WELCOME10", _cart(3))
        handler.handle(session, "MINUS5", _cart(3))
        assert session.applied_discount.code == "MINUS5"

    def test_remove(self):
        handler, _ = _setup()
        session = CheckoutSession()
        handler.handle(session, "WELCOME10", _cart(1))
        handler.remove(session)
        assert session.applied_discount is None


class TestApplyDiscountRejections:

    @pytest.mark.parametrize("code, qty, reason", [
        ("NOPE", 1, "invalid_code"),
        ("OLD", 1, "expired"),
        ("USEDUP", 1, "max_uses_reached"),
        ("MINUS5", 1, "min_order_not_met"),
    ])
    def test_rejection_reasons(self, code, qty, reason):
        handler, _ = _setup()
        with pytest.raises(InvalidDiscount) as exc_info:
            handler.handle(CheckoutSession(), code, _cart(qty))
        assert exc_info.value.reason == reason

    def test_empty_code_skips_lookup(self):
        handler, discounts = _setup()
        with pytest.raises(InvalidDiscount, match="enter a discount code"):
            handler.handle(CheckoutSession(), "   ", _cart(1))
        assert discounts.lookups == []

    def test_rejection_keeps_previous_discount(self):
        handler, _ = _setup()
        session = CheckoutSession()
        handler.handle(session, "WELCOME10", _cart(1))
        with pytest.raises(InvalidDiscount, match="expired"):
            handler.handle(session, "OLD", _cart(1))
        assert session.applied_discount.code == "WELCOME10"
