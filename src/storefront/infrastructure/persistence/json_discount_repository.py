"""JSON-file-backed implementation of DiscountRepository."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.discount import DiscountCode, DiscountType
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.discount_repository import DiscountRepository
from storefront.infrastructure.persistence.json_file import ensure_file, read_json

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JsonDiscountRepository(DiscountRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_file(self._file_path, [])

    def get_by_code(self, code: str) -> DiscountCode | None:
        for raw in read_json(self._file_path):
            if raw["code"].strip().upper() == code:
                return self._to_domain(raw)
        return None

    @staticmethod
    def _to_domain(raw: dict) -> DiscountCode:
        min_order = raw.get("min_order_amount")
        if min_order is not None:
            min_order = Money(Decimal(str(min_order)), raw.get("currency", "EUR"))
        return DiscountCode(
            code=raw["code"].strip().upper(),
            type=DiscountType(raw["type"]),
            value=Decimal(str(raw["value"])),
            valid_from=_parse_datetime(raw.get("valid_from")) or _EPOCH,
            valid_until=_parse_datetime(raw.get("valid_until")),
            min_order_amount=min_order,
            max_uses=raw.get("max_uses"),
            current_uses=raw.get("current_uses", 0),
            is_active=raw.get("is_active", True),
        )
