"""Checkout form field validation.

Each validator looks at one field and returns an error message or None,
so a bad value only ever produces an error on its own field.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from storefront.domain.model.checkout import CheckoutForm

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_POSTAL_CODE_RE = re.compile(r"^\d{4}$")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-().]")
_INTERNATIONAL_PHONE_RE = re.compile(r"^\+?\d{8,15}$")

# Slovenian operators and landline area codes, national format.
_SI_MOBILE_RE = re.compile(r"^(030|031|040|041|051|064|065|068|069|070|071)\d{6}$")
_SI_LANDLINE_RE = re.compile(r"^0[1-57]\d{6,7}$")
_SLOVENIA = {"slovenija", "slovenia", "si"}

_SPECIAL_CHAR_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")
MIN_PASSWORD_LENGTH = 10


def validate_full_name(value: str) -> str | None:
    parts = value.split()
    if not parts:
        return "Name is required"
    if len(parts) < 2 or any(len(part) < 2 for part in parts):
        return "Please enter your first and last name"
    return None


def validate_email(value: str) -> str | None:
    value = value.strip()
    if not value:
        return "Email is required"
    if not _EMAIL_RE.match(value):
        return "Please enter a valid email address"
    domain = value.rsplit("@", 1)[1]
    if domain.startswith(".") or domain.endswith(".") or len(domain.rsplit(".", 1)[1]) < 2:
        return "Please enter a valid email address"
    return None


def validate_phone(value: str, country: str) -> str | None:
    """Phone shape depends on the selected country."""
    cleaned = _PHONE_SEPARATORS_RE.sub("", value)
    if not cleaned:
        return "Phone number is required"

    if country.strip().lower() not in _SLOVENIA:
        if not _INTERNATIONAL_PHONE_RE.match(cleaned):
            return "Please enter a valid phone number"
        return None

    national = cleaned
    for prefix in ("+386", "00386", "386"):
        if national.startswith(prefix):
            national = national[len(prefix):]
            break
    if not national.startswith("0"):
        national = "0" + national
    if _SI_MOBILE_RE.match(national) or _SI_LANDLINE_RE.match(national):
        return None
    return "Please enter a valid Slovenian phone number"


def validate_postal_code(value: str) -> str | None:
    cleaned = value.replace(" ", "")
    if not cleaned:
        return "Postal code is required"
    if not _POSTAL_CODE_RE.match(cleaned):
        return "Please enter a valid 4-digit postal code"
    return None


def validate_address(value: str) -> str | None:
    value = value.strip()
    if not value:
        return "Address is required"
    if len(value) < 5 or not any(ch.isdigit() for ch in value):
        return "Please enter a street and house number"
    return None


def validate_city(value: str) -> str | None:
    value = value.strip()
    if not value:
        return "City is required"
    if len(value) < 2:
        return "Please enter a valid city name"
    return None


def validate_country(value: str) -> str | None:
    if not value.strip():
        return "Country is required"
    return None


def validate_password(value: str) -> str | None:
    if not value:
        return "Password is required"
    if (
        len(value) < MIN_PASSWORD_LENGTH
        or not re.search(r"[A-Z]", value)
        or not re.search(r"[a-z]", value)
        or not re.search(r"\d", value)
        or not _SPECIAL_CHAR_RE.search(value)
    ):
        return (
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters and contain "
            "an uppercase letter, a lowercase letter, a number and a special character"
        )
    return None


# Required checkout fields, in display order.
_FIELD_VALIDATORS: dict[str, Callable[[CheckoutForm], str | None]] = {
    "name": lambda form: validate_full_name(form.name),
    "email": lambda form: validate_email(form.email),
    "phone": lambda form: validate_phone(form.phone, form.country),
    "address": lambda form: validate_address(form.address),
    "city": lambda form: validate_city(form.city),
    "postal_code": lambda form: validate_postal_code(form.postal_code),
    "country": lambda form: validate_country(form.country),
}

CHECKOUT_FIELDS = tuple(_FIELD_VALIDATORS)


def validate_checkout_field(form: CheckoutForm, field_name: str) -> str | None:
    """Validate one required field; non-required fields always pass."""
    validator = _FIELD_VALIDATORS.get(field_name)
    if validator is None:
        return None
    return validator(form)


def validate_checkout_form(form: CheckoutForm) -> dict[str, str]:
    """Return field -> message for every failing required field."""
    errors: dict[str, str] = {}
    for field_name, validator in _FIELD_VALIDATORS.items():
        message = validator(form)
        if message is not None:
            errors[field_name] = message
    return errors
