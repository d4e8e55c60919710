"""Abstract store for placed orders."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import InsertedOrder, Order


class OrderStore(ABC):

    @abstractmethod
    def next_order_number(self) -> int:
        """Atomically allocate the next order number.

        Numbers are strictly increasing and never handed out twice,
        even to concurrent callers.
        """

    @abstractmethod
    def insert(self, order: Order) -> InsertedOrder:
        """Persist a new order in a single write.

        Inserting an order whose ``idempotency_key`` is already stored
        returns the existing record instead of writing a duplicate.
        """

    @abstractmethod
    def get_by_number(self, order_number: int) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return all placed orders, oldest first."""
