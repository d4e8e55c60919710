"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Every subclass carries a stable ``reason`` code that callers use to pick a
localized message; the human-readable text is only a fallback.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    reason = "domain_error"
    retryable = False

    def __init__(self, message: str = "", reason: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        if reason is not None:
            self.reason = reason


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    reason = "validation_error"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    reason = "not_found"


# --- Cart / stock -------------------------------------------------------------


class InvalidQuantity(ValidationError):
    reason = "invalid_quantity"


class ProductUnavailable(DomainException):
    reason = "product_unavailable"


class InsufficientStock(DomainException):
    """Requested quantity plus the quantity already held exceeds stock."""

    reason = "insufficient_stock"

    def __init__(self, message: str, available: int, in_cart: int) -> None:
        super().__init__(message)
        self.available = available
        self.in_cart = in_cart


# --- Discounts ----------------------------------------------------------------


class InvalidDiscount(DomainException):
    reason = "invalid_discount"


# --- Checkout flow ------------------------------------------------------------


class FieldValidationError(ValidationError):
    """One or more checkout form fields are invalid.

    ``errors`` maps field name -> message, one entry per failing field.
    """

    reason = "invalid_fields"

    def __init__(self, errors: dict[str, str]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid checkout details: {fields}")
        self.errors = dict(errors)


class CheckoutNotReady(ValidationError):
    reason = "checkout_not_ready"


class AuthenticationFailed(DomainException):
    reason = "authentication_failed"


class SignupFailed(DomainException):
    reason = "signup_failed"


# --- Submission ---------------------------------------------------------------


class PaymentIncomplete(DomainException):
    reason = "payment_incomplete"


class SubmissionFailed(DomainException):
    """Base for failures that can happen after payment was captured.

    ``payment_reference`` is the captured payment id (if any) so the
    caller can reconcile instead of charging the shopper again.
    """

    reason = "submission_failed"

    def __init__(self, message: str, payment_reference: str | None = None) -> None:
        super().__init__(message)
        self.payment_reference = payment_reference


class ProfileResolutionFailed(SubmissionFailed):
    reason = "profile_resolution_failed"


class OrderNumberAllocationFailed(SubmissionFailed):
    reason = "order_number_allocation_failed"
    retryable = True


class OrderPersistFailed(SubmissionFailed):
    reason = "order_persist_failed"
    retryable = True


# --- Infrastructure signals ---------------------------------------------------


class StorageError(Exception):
    """Transient failure of a storage backend (I/O, network).

    Not a DomainException: adapters raise it, the application layer
    decides whether to retry and which domain failure to surface.
    """


class PaymentGatewayError(Exception):
    """The payment provider could not be reached or answered garbage."""
