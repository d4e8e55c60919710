"""Runtime settings read from ``STOREFRONT_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storefront.domain.model.pricing import ShippingConfig
from storefront.domain.model.value_objects import Money

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:

    data_dir: Path = _DEFAULT_DATA_DIR
    currency: str = "EUR"
    shipping_cost: str = "3.90"
    free_shipping_threshold: str = "30.00"
    payments_base_url: str | None = None
    payments_api_key: str = ""
    payment_confirm_timeout: float = 30.0
    submit_retry_max: int = 3
    submit_retry_backoff: float = 0.2
    log_level: str = "WARNING"
    log_format: str = "text"

    @property
    def shipping(self) -> ShippingConfig:
        return ShippingConfig(
            flat_cost=Money.of(self.shipping_cost, self.currency),
            free_threshold=Money.of(self.free_shipping_threshold, self.currency),
        )

    @property
    def card_payments_enabled(self) -> bool:
        return bool(self.payments_base_url)

    @staticmethod
    def from_env() -> Settings:
        data_dir = os.getenv("STOREFRONT_DATA_DIR")
        return Settings(
            data_dir=Path(data_dir) if data_dir else _DEFAULT_DATA_DIR,
            currency=os.getenv("STOREFRONT_CURRENCY", "EUR").upper(),
            shipping_cost=os.getenv("STOREFRONT_SHIPPING_COST", "3.90"),
            free_shipping_threshold=os.getenv("STOREFRONT_FREE_SHIPPING_THRESHOLD", "30.00"),
            payments_base_url=os.getenv("STOREFRONT_PAYMENTS_BASE_URL") or None,
            payments_api_key=os.getenv("STOREFRONT_PAYMENTS_API_KEY", ""),
            payment_confirm_timeout=float(os.getenv("STOREFRONT_PAYMENT_CONFIRM_TIMEOUT", "30")),
            submit_retry_max=int(os.getenv("STOREFRONT_SUBMIT_RETRY_MAX", "3")),
            submit_retry_backoff=float(os.getenv("STOREFRONT_SUBMIT_RETRY_BACKOFF", "0.2")),
            log_level=os.getenv("STOREFRONT_LOG_LEVEL", "WARNING").upper(),
            log_format=os.getenv("STOREFRONT_LOG_FORMAT", "text").lower(),
        )
