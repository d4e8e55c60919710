"""Checkout session: everything the shopper chose on the way to an order.

The session is a plain mutable record; transitions between steps are
owned by CheckoutStateMachine, and the submission progress fields are
owned by OrderSubmitter.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from storefront.domain.model.discount import DiscountCode
from storefront.domain.model.payment import PaymentMethod, PaymentState
from storefront.domain.model.profile import ShippingAddress

if TYPE_CHECKING:
    from storefront.domain.model.order import Order

DEFAULT_COUNTRY = "Slovenija"


class CheckoutStep(Enum):
    SELECTION = "selection"
    GUEST_FORM = "guest_form"
    AUTH_FORM = "auth_form"


class AuthSubState(Enum):
    INITIAL = "initial"
    LOGIN = "login"
    SIGNUP = "signup"
    LOGGED_IN = "loggedIn"


@dataclass
class CheckoutForm:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = DEFAULT_COUNTRY
    notes: str = ""
    password: str = ""
    confirm_password: str = ""

    def shipping_address(self) -> ShippingAddress:
        return ShippingAddress(
            address=self.address.strip(),
            city=self.city.strip(),
            postal_code=self.postal_code.strip(),
            country=self.country.strip(),
        )


@dataclass(frozen=True)
class GiftSelection:
    """Order-level gift add-ons: packaging and/or an extra product."""

    gift_option_id: str | None = None
    gift_product_id: str | None = None
    gift_product_package_id: str | None = None
    message: str = ""
    recipient_address: ShippingAddress | None = None

    @property
    def is_empty(self) -> bool:
        return self.gift_option_id is None and self.gift_product_id is None


@dataclass
class SubmissionProgress:
    """What a submission already achieved for this session.

    Retries of the same session pick up from here, so the profile is
    resolved once, the order number is allocated once, and a captured
    payment is never confirmed twice.
    """

    profile_id: str | None = None
    order_number: int | None = None
    order: Order | None = None


@dataclass
class CheckoutSession:

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    step: CheckoutStep = CheckoutStep.SELECTION
    auth_sub_state: AuthSubState = AuthSubState.INITIAL
    form: CheckoutForm = field(default_factory=CheckoutForm)
    field_errors: dict[str, str] = field(default_factory=dict)
    user_id: str | None = None
    applied_discount: DiscountCode | None = None
    gift_selections: GiftSelection = field(default_factory=GiftSelection)
    payment_method: PaymentMethod | None = None
    payment: PaymentState = field(default_factory=PaymentState)
    submission: SubmissionProgress = field(default_factory=SubmissionProgress)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def allows_submission(self) -> bool:
        if self.step is CheckoutStep.GUEST_FORM:
            return True
        return (
            self.step is CheckoutStep.AUTH_FORM
            and self.auth_sub_state is AuthSubState.LOGGED_IN
        )
