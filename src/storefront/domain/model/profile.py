"""Customer profile and shipping address."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShippingAddress:

    address: str
    city: str
    postal_code: str
    country: str


@dataclass(frozen=True)
class Profile:
    """A customer identity.

    For authenticated users ``id`` equals the auth user id; guest
    profiles get a generated id and are found again by email.
    """

    id: str
    email: str
    full_name: str = ""
    phone: str = ""
    default_shipping_address: ShippingAddress | None = None
