"""JSON-file-backed implementation of OrderStore.

File layout::

    {"last_order_number": 41, "orders": [...]}

Number allocation and inserts are serialized by a process-wide lock, and
every write replaces the whole file atomically.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.checkout import GiftSelection
from storefront.domain.model.order import InsertedOrder, Order, OrderLineItem, OrderStatus
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.pricing import Totals
from storefront.domain.model.profile import ShippingAddress
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_store import OrderStore
from storefront.infrastructure.persistence.json_file import ensure_file, read_json, write_json

_LOCK = threading.RLock()

_TOTAL_FIELDS = (
    "subtotal",
    "discount_amount",
    "subtotal_after_discount",
    "shipping_cost",
    "gift_option_cost",
    "gift_product_cost",
    "total",
)


class JsonOrderStore(OrderStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        with _LOCK:
            ensure_file(self._file_path, {"last_order_number": 0, "orders": []})

    # --- OrderStore interface -------------------------------------------------

    def next_order_number(self) -> int:
        with _LOCK:
            data = read_json(self._file_path)
            data["last_order_number"] += 1
            write_json(self._file_path, data)
            return data["last_order_number"]

    def insert(self, order: Order) -> InsertedOrder:
        with _LOCK:
            data = read_json(self._file_path)
            for raw in data["orders"]:
                if raw["idempotency_key"] == order.idempotency_key:
                    return InsertedOrder(id=raw["id"], order_number=raw["order_number"])

            order_id = order.id or uuid.uuid4().hex
            data["orders"].append(self._to_raw(order, order_id))
            write_json(self._file_path, data)
            return InsertedOrder(id=order_id, order_number=order.order_number)

    def get_by_number(self, order_number: int) -> Order | None:
        for raw in read_json(self._file_path)["orders"]:
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in read_json(self._file_path)["orders"]]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order, order_id: str) -> dict:
        gift = order.gift
        return {
            "id": order_id,
            "order_number": order.order_number,
            "profile_id": order.profile_id,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "idempotency_key": order.idempotency_key,
            "is_guest": order.is_guest,
            "payment_method": order.payment_method.value,
            "payment_reference": order.payment_reference,
            "discount_code": order.discount_code,
            "notes": order.notes,
            "currency": order.total.currency,
            "totals": {name: str(getattr(order.totals, name).amount) for name in _TOTAL_FIELDS},
            "shipping_address": _address_to_raw(order.shipping_address),
            "gift": {
                "gift_option_id": gift.gift_option_id,
                "gift_product_id": gift.gift_product_id,
                "gift_product_package_id": gift.gift_product_package_id,
                "message": gift.message,
                "recipient_address": _address_to_raw(gift.recipient_address),
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "package_option_id": item.package_option_id,
                    "product_name": item.product_name,
                    "package_description": item.package_description,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "line_total": str(item.line_total.amount),
                    "is_gift": item.is_gift,
                    "gift_details": item.gift_details,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "EUR")
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                package_option_id=i["package_option_id"],
                product_name=i["product_name"],
                package_description=i.get("package_description", ""),
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
                is_gift=i.get("is_gift", False),
                gift_details=i.get("gift_details"),
            )
            for i in raw["items"]
        ]
        totals = Totals(
            **{name: Money(Decimal(raw["totals"][name]), currency) for name in _TOTAL_FIELDS}
        )
        gift = raw.get("gift") or {}
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            profile_id=raw["profile_id"],
            items=tuple(items),
            shipping_address=_address_from_raw(raw["shipping_address"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            totals=totals,
            is_guest=raw["is_guest"],
            idempotency_key=raw["idempotency_key"],
            payment_reference=raw.get("payment_reference"),
            discount_code=raw.get("discount_code"),
            gift=GiftSelection(
                gift_option_id=gift.get("gift_option_id"),
                gift_product_id=gift.get("gift_product_id"),
                gift_product_package_id=gift.get("gift_product_package_id"),
                message=gift.get("message", ""),
                recipient_address=_address_from_raw(gift.get("recipient_address")),
            ),
            notes=raw.get("notes", ""),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )


def _address_to_raw(address: ShippingAddress | None) -> dict | None:
    if address is None:
        return None
    return {
        "address": address.address,
        "city": address.city,
        "postal_code": address.postal_code,
        "country": address.country,
    }


def _address_from_raw(raw: dict | None) -> ShippingAddress | None:
    if raw is None:
        return None
    return ShippingAddress(**raw)
