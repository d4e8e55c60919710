"""Domain service: repository-backed discount validation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from storefront.domain.model.discount import DiscountValidation
from storefront.domain.model.value_objects import Money
from storefront.domain.port.discount_validator import DiscountValidator
from storefront.domain.repository.discount_repository import DiscountRepository


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RepositoryDiscountValidator(DiscountValidator):
    """Validates codes stored in a DiscountRepository.

    Rules, first failure wins: unknown or inactive, outside the validity
    window, usage limit reached, minimum order amount not met.
    """

    def __init__(
        self,
        discount_repo: DiscountRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._discount_repo = discount_repo
        self._clock = clock

    def validate(self, code: str, subtotal: Money) -> DiscountValidation:
        discount = self._discount_repo.get_by_code(code.strip().upper())
        if discount is None:
            return DiscountValidation(valid=False, reason="invalid_code")

        reason = discount.rejection_reason(subtotal, self._clock())
        if reason is not None:
            return DiscountValidation(valid=False, reason=reason)
        return DiscountValidation(valid=True, discount=discount)
