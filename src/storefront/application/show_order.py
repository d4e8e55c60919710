"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.order_store import OrderStore


class ShowOrderHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, order_number: int) -> OrderDTO:
        order = self._order_store.get_by_number(order_number)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_number} not found")
        return OrderDTO.from_order(order)
