"""Abstract store for customer profiles."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.profile import Profile


class ProfileStore(ABC):

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> Profile | None:
        """Return the profile owned by an authenticated user, or None."""

    @abstractmethod
    def find_by_email(self, email: str) -> Profile | None:
        """Return the profile registered under ``email`` (case-insensitive)."""

    @abstractmethod
    def upsert(self, profile: Profile) -> Profile:
        """Insert or replace the profile with ``profile.id``."""
