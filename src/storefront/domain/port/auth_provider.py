"""Port: the authentication backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str


class AuthProvider(ABC):

    @abstractmethod
    def current_user(self) -> AuthUser | None:
        """Return the user of a valid existing session, if any."""

    @abstractmethod
    def email_exists(self, email: str) -> bool:
        """True if an account is registered for ``email``."""

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthUser:
        """Authenticate. Raises AuthenticationFailed on bad credentials."""

    @abstractmethod
    def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an account. Raises SignupFailed if it cannot be created."""
