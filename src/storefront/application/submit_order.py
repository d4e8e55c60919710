"""Application service: Submit Order use case.

Turns a ready checkout session into exactly one persisted order:

1. readiness (state machine, non-empty cart, payment method chosen)
2. totals re-derived server-side
3. card payment confirmed (one extra round for step-up authentication)
4. profile resolved, idempotently
5. order number allocated atomically
6. order inserted in one write, keyed by the session id
7. cart cleared

Whatever a step achieves is recorded on ``session.submission`` (and the
captured payment on ``session.payment``), so a retried submission of
the same session resumes instead of repeating side effects.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import replace
from typing import TypeVar

from storefront.application.cart_store import CartStore
from storefront.application.checkout_state_machine import CheckoutStateMachine
from storefront.application.quote_cart import QuoteCartHandler
from storefront.domain.exceptions import (
    OrderNumberAllocationFailed,
    OrderPersistFailed,
    PaymentGatewayError,
    PaymentIncomplete,
    ProfileResolutionFailed,
    StorageError,
    SubmissionFailed,
    ValidationError,
)
from storefront.domain.model.cart import CartSnapshot
from storefront.domain.model.checkout import CheckoutForm, CheckoutSession
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.payment import (
    PaymentConfirmation,
    PaymentMethod,
    PaymentState,
    PaymentStatus,
)
from storefront.domain.model.pricing import Totals
from storefront.domain.model.profile import Profile
from storefront.domain.model.value_objects import Money
from storefront.domain.port.payment_gateway import PaymentGateway
from storefront.domain.repository.order_store import OrderStore
from storefront.domain.repository.profile_store import ProfileStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrderSubmitter:

    def __init__(
        self,
        checkout: CheckoutStateMachine,
        quote_handler: QuoteCartHandler,
        cart_store: CartStore,
        profile_store: ProfileStore,
        order_store: OrderStore,
        payment_gateway: PaymentGateway | None = None,
        *,
        confirm_timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_backoff: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1")
        self._checkout = checkout
        self._quote_handler = quote_handler
        self._cart_store = cart_store
        self._profile_store = profile_store
        self._order_store = order_store
        self._payments = payment_gateway
        self._confirm_timeout = confirm_timeout
        self._retry_attempts = retry_attempts
        self._retry_backoff = retry_backoff
        self._sleep = sleep

        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def submit(
        self,
        session: CheckoutSession,
        cart: CartSnapshot,
        totals: Totals | None = None,
    ) -> Order | None:
        """Place the order for ``session``.

        Returns None if a submission for the same session is already in
        progress, and the previously placed order if there is one.

        Raises:
            CheckoutNotReady / FieldValidationError / ValidationError:
                the session or cart is not ready; fix and resubmit.
            PaymentIncomplete: the card payment did not succeed.
            SubmissionFailed: a later step failed; ``payment_reference``
                holds the captured payment, if any.
        """
        with self._lock:
            if session.id in self._in_flight:
                logger.info("Submission already in flight for session %s; ignoring", session.id)
                return None
            self._in_flight.add(session.id)
        try:
            return self._submit(session, cart, totals)
        finally:
            with self._lock:
                self._in_flight.discard(session.id)

    # --- Steps ----------------------------------------------------------------

    def _submit(
        self,
        session: CheckoutSession,
        cart: CartSnapshot,
        client_totals: Totals | None,
    ) -> Order:
        if session.submission.order is not None:
            logger.info(
                "Session %s already placed order #%d",
                session.id, session.submission.order.order_number,
            )
            return session.submission.order

        self._checkout.require_submittable(session)
        if cart.is_empty:
            raise ValidationError("Cannot place an order with an empty cart", reason="cart_empty")
        if session.payment_method is None:
            raise ValidationError(
                "Please choose a payment method", reason="payment_method_required"
            )

        quote = self._quote_handler.handle(cart, session)
        if client_totals is not None and client_totals != quote.totals:
            logger.warning(
                "Client totals for session %s differ from server totals (%s != %s); "
                "using server totals",
                session.id, client_totals.total, quote.totals.total,
            )

        payment_reference = self._ensure_payment(session, quote.totals.total)
        profile_id = self._resolve_profile(session, payment_reference)

        if session.submission.order_number is None:
            session.submission.order_number = self._with_retries(
                self._order_store.next_order_number,
                OrderNumberAllocationFailed,
                "Order number allocation",
                payment_reference,
            )
            logger.info(
                "Allocated order number %d for session %s",
                session.submission.order_number, session.id,
            )

        discount_code = None
        if session.applied_discount is not None and quote.totals.discount_amount.amount > 0:
            discount_code = session.applied_discount.code

        order = Order.create(
            order_number=session.submission.order_number,
            profile_id=profile_id,
            items=[OrderLineItem.from_priced(line) for line in quote.lines],
            shipping_address=session.form.shipping_address(),
            payment_method=session.payment_method,
            totals=quote.totals,
            is_guest=session.is_guest,
            idempotency_key=session.id,
            payment_reference=payment_reference,
            discount_code=discount_code,
            gift=session.gift_selections,
            notes=session.form.notes,
        )
        inserted = self._with_retries(
            lambda: self._order_store.insert(order),
            OrderPersistFailed,
            "Order persistence",
            payment_reference,
        )
        placed = replace(order, id=inserted.id, order_number=inserted.order_number)
        session.submission.order = placed
        logger.info(
            "Order #%d placed for profile %s (%s, total %s)",
            placed.order_number, profile_id, placed.payment_method.value, placed.total,
        )

        try:
            self._cart_store.clear_cart()
        except StorageError:
            logger.error(
                "Order #%d placed but the cart could not be cleared",
                placed.order_number, exc_info=True,
            )
        return placed

    # --- Payment --------------------------------------------------------------

    def _ensure_payment(self, session: CheckoutSession, total: Money) -> str | None:
        """Return the captured payment reference for card orders, else None.

        The intent must have been prepared for exactly ``total``.
        """
        state = session.payment
        if session.payment_method is not PaymentMethod.CREDIT_CARD:
            if state.is_captured:
                raise ValidationError(
                    f"This checkout was already paid by card ({state.reference}); "
                    "the payment method cannot be changed",
                    reason="payment_already_captured",
                )
            return None

        if state.is_captured:
            self._require_intent_amount(session, total)
            logger.info("Reusing captured payment %s for session %s", state.reference, session.id)
            return state.reference

        if self._payments is None or not state.client_secret:
            raise PaymentIncomplete("Please complete the card payment before placing the order")
        self._require_intent_amount(session, total)

        confirmation = self._confirm(state)
        if confirmation.status is PaymentStatus.REQUIRES_ACTION:
            logger.info("Payment for session %s requires additional authentication", session.id)
            confirmation = self._confirm(state)

        state.status = confirmation.status
        if confirmation.status is not PaymentStatus.SUCCEEDED or not confirmation.id:
            logger.warning(
                "Payment for session %s not completed (status=%s)",
                session.id, confirmation.status.value,
            )
            raise PaymentIncomplete(
                f"Payment was not completed (status: {confirmation.status.value})"
            )

        state.reference = confirmation.id
        logger.info("Payment %s captured for session %s", confirmation.id, session.id)
        return confirmation.id

    def _require_intent_amount(self, session: CheckoutSession, total: Money) -> None:
        prepared = session.payment.amount
        if prepared == total:
            return
        logger.warning(
            "Payment for session %s was prepared for %s but the order total is %s",
            session.id, prepared, total,
        )
        raise PaymentIncomplete(
            f"The order total changed to {total} since the card payment was prepared; "
            "please prepare the payment again",
            reason="payment_amount_mismatch",
        )

    def _confirm(self, state: PaymentState) -> PaymentConfirmation:
        try:
            return self._payments.confirm(
                state.client_secret, state.method_ref, timeout=self._confirm_timeout
            )
        except TimeoutError as exc:
            state.status = PaymentStatus.FAILED
            raise PaymentIncomplete(
                f"Payment confirmation timed out after {self._confirm_timeout:g}s"
            ) from exc
        except PaymentGatewayError as exc:
            state.status = PaymentStatus.FAILED
            raise PaymentIncomplete(f"Payment confirmation failed: {exc}") from exc

    # --- Profile --------------------------------------------------------------

    def _resolve_profile(self, session: CheckoutSession, payment_reference: str | None) -> str:
        if session.submission.profile_id is not None:
            return session.submission.profile_id

        try:
            if session.user_id is not None:
                profile = self._resolve_user_profile(session.user_id, session.form)
            else:
                profile = self._resolve_guest_profile(session.form)
        except StorageError as exc:
            raise ProfileResolutionFailed(
                f"Could not resolve customer profile: {exc}",
                payment_reference=payment_reference,
            ) from exc

        session.submission.profile_id = profile.id
        return profile.id

    def _resolve_user_profile(self, user_id: str, form: CheckoutForm) -> Profile:
        existing = self._profile_store.find_by_user_id(user_id)
        if existing is None:
            logger.info("Creating profile for user %s", user_id)
            return self._profile_store.upsert(_profile_from_form(user_id, form))

        filled = replace(
            existing,
            email=existing.email or form.email.strip(),
            full_name=existing.full_name or form.name.strip(),
            phone=existing.phone or form.phone.strip(),
            default_shipping_address=(
                existing.default_shipping_address or form.shipping_address()
            ),
        )
        if filled == existing:
            return existing
        logger.info("Filling missing contact details on profile %s", user_id)
        return self._profile_store.upsert(filled)

    def _resolve_guest_profile(self, form: CheckoutForm) -> Profile:
        existing = self._profile_store.find_by_email(form.email.strip())
        if existing is None:
            profile = _profile_from_form(str(uuid.uuid4()), form)
            logger.info("Creating guest profile %s", profile.id)
            return self._profile_store.upsert(profile)

        updated = replace(
            existing,
            full_name=form.name.strip(),
            phone=form.phone.strip(),
            default_shipping_address=form.shipping_address(),
        )
        logger.info("Reusing guest profile %s", existing.id)
        if updated == existing:
            return existing
        return self._profile_store.upsert(updated)

    # --- Retries --------------------------------------------------------------

    def _with_retries(
        self,
        operation: Callable[[], T],
        failure: type[SubmissionFailed],
        what: str,
        payment_reference: str | None,
    ) -> T:
        """Run ``operation``, retrying StorageError with exponential backoff."""
        attempt = 1
        while True:
            try:
                return operation()
            except StorageError as exc:
                if attempt >= self._retry_attempts:
                    raise failure(
                        f"{what} failed after {attempt} attempt(s): {exc}",
                        payment_reference=payment_reference,
                    ) from exc
                delay = self._retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "%s failed (attempt %d/%d), retrying in %.2fs: %s",
                    what, attempt, self._retry_attempts, delay, exc,
                )
                self._sleep(delay)
                attempt += 1


def _profile_from_form(profile_id: str, form: CheckoutForm) -> Profile:
    return Profile(
        id=profile_id,
        email=form.email.strip(),
        full_name=form.name.strip(),
        phone=form.phone.strip(),
        default_shipping_address=form.shipping_address(),
    )
