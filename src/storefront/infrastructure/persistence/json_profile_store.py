"""JSON-file-backed implementation of ProfileStore."""

from __future__ import annotations

import threading
from pathlib import Path

from storefront.domain.model.profile import Profile, ShippingAddress
from storefront.domain.repository.profile_store import ProfileStore
from storefront.infrastructure.persistence.json_file import ensure_file, read_json, write_json


class JsonProfileStore(ProfileStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        ensure_file(self._file_path, [])

    # --- ProfileStore interface -----------------------------------------------

    def find_by_user_id(self, user_id: str) -> Profile | None:
        for raw in read_json(self._file_path):
            if raw["id"] == user_id:
                return self._to_domain(raw)
        return None

    def find_by_email(self, email: str) -> Profile | None:
        wanted = email.strip().lower()
        for raw in read_json(self._file_path):
            if raw["email"].strip().lower() == wanted:
                return self._to_domain(raw)
        return None

    def upsert(self, profile: Profile) -> Profile:
        with self._lock:
            profiles = read_json(self._file_path)
            for i, raw in enumerate(profiles):
                if raw["id"] == profile.id:
                    profiles[i] = self._to_raw(profile)
                    break
            else:
                profiles.append(self._to_raw(profile))
            write_json(self._file_path, profiles)
        return profile

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(profile: Profile) -> dict:
        address = profile.default_shipping_address
        return {
            "id": profile.id,
            "email": profile.email,
            "full_name": profile.full_name,
            "phone": profile.phone,
            "default_shipping_address": None if address is None else {
                "address": address.address,
                "city": address.city,
                "postal_code": address.postal_code,
                "country": address.country,
            },
        }

    @staticmethod
    def _to_domain(raw: dict) -> Profile:
        address = raw.get("default_shipping_address")
        return Profile(
            id=raw["id"],
            email=raw["email"],
            full_name=raw.get("full_name", ""),
            phone=raw.get("phone", ""),
            default_shipping_address=ShippingAddress(**address) if address else None,
        )
