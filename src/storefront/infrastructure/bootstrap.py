"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. Settings are read from
the environment on each call, never at import time.
"""

from __future__ import annotations

from collections.abc import Callable

from storefront.application.apply_discount import ApplyDiscountHandler
from storefront.application.cart_store import CartStore
from storefront.application.checkout_state_machine import CheckoutStateMachine
from storefront.application.prepare_card_payment import PrepareCardPaymentHandler
from storefront.application.quote_cart import QuoteCartHandler
from storefront.application.submit_order import OrderSubmitter
from storefront.domain.model.cart import CartLineItem
from storefront.domain.service.catalog_stock_oracle import CatalogStockOracle
from storefront.domain.service.discount_validator import RepositoryDiscountValidator
from storefront.domain.service.pricing_engine import PricingEngine
from storefront.infrastructure.config import Settings
from storefront.infrastructure.payments.http_payment_gateway import HttpPaymentGateway
from storefront.infrastructure.persistence.json_discount_repository import (
    JsonDiscountRepository,
)
from storefront.infrastructure.persistence.json_key_value_storage import (
    JsonKeyValueStorage,
)
from storefront.infrastructure.persistence.json_order_store import JsonOrderStore
from storefront.infrastructure.persistence.json_product_repository import (
    JsonGiftOptionRepository,
    JsonProductRepository,
)
from storefront.infrastructure.persistence.json_profile_store import JsonProfileStore


def settings() -> Settings:
    return Settings.from_env()


# --- Persistence ----------------------------------------------------------------


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(settings().data_dir / "products.json")


def gift_option_repository() -> JsonGiftOptionRepository:
    return JsonGiftOptionRepository(settings().data_dir / "gift_options.json")


def discount_repository() -> JsonDiscountRepository:
    return JsonDiscountRepository(settings().data_dir / "discounts.json")


def profile_store() -> JsonProfileStore:
    return JsonProfileStore(settings().data_dir / "profiles.json")


def order_store() -> JsonOrderStore:
    return JsonOrderStore(settings().data_dir / "orders.json")


def cart_storage() -> JsonKeyValueStorage:
    return JsonKeyValueStorage(settings().data_dir / "storage.json")


# --- Services -------------------------------------------------------------------


def cart_store(
    on_item_added: Callable[[CartLineItem], None] | None = None,
) -> CartStore:
    return CartStore(
        stock_oracle=CatalogStockOracle(product_repository()),
        storage=cart_storage(),
        on_item_added=on_item_added,
    )


def quote_handler() -> QuoteCartHandler:
    return QuoteCartHandler(
        product_repo=product_repository(),
        gift_option_repo=gift_option_repository(),
        pricing_engine=PricingEngine(settings().shipping),
    )


def payment_gateway() -> HttpPaymentGateway | None:
    s = settings()
    if not s.card_payments_enabled:
        return None
    return HttpPaymentGateway(
        base_url=s.payments_base_url,
        api_key=s.payments_api_key,
        timeout=s.payment_confirm_timeout,
    )


def checkout_state_machine() -> CheckoutStateMachine:
    # No auth backend is wired for the CLI: checkout runs as guest.
    return CheckoutStateMachine(profile_store=profile_store(), auth=None)


def apply_discount_handler() -> ApplyDiscountHandler:
    return ApplyDiscountHandler(
        quote_handler=quote_handler(),
        validator=RepositoryDiscountValidator(discount_repository()),
    )


def prepare_card_payment_handler() -> PrepareCardPaymentHandler | None:
    gateway = payment_gateway()
    if gateway is None:
        return None
    return PrepareCardPaymentHandler(quote_handler=quote_handler(), gateway=gateway)


def order_submitter(
    checkout: CheckoutStateMachine,
    cart: CartStore,
) -> OrderSubmitter:
    s = settings()
    return OrderSubmitter(
        checkout=checkout,
        quote_handler=quote_handler(),
        cart_store=cart,
        profile_store=profile_store(),
        order_store=order_store(),
        payment_gateway=payment_gateway(),
        confirm_timeout=s.payment_confirm_timeout,
        retry_attempts=s.submit_retry_max,
        retry_backoff=s.submit_retry_backoff,
    )
