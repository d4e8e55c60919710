"""Read-only stock answer for one product variant."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StockSnapshot:

    available_quantity: int
    is_active: bool
