"""Tests for the CartStore application service.

Uses an in-memory stock oracle and key/value storage, no file I/O.
"""

import json
import logging

import pytest

from storefront.application.cart_store import CART_STORAGE_KEY, CartStore
from storefront.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStock,
    InvalidQuantity,
    ProductUnavailable,
    StorageError,
)
from storefront.domain.model.cart import GiftLineItem
from storefront.domain.model.value_objects import Money, Quantity
from tests.fakes import FakeKeyValueStorage, FakeStockOracle


def _setup(
    stock: int = 5, stored: dict[str, str] | None = None, on_item_added=None,
) -> tuple[CartStore, FakeStockOracle, FakeKeyValueStorage]:
    """Build a store over one variant (1/p1) with ``stock`` units available."""
    oracle = FakeStockOracle()
    oracle.set("1", "p1", stock)
    oracle.set("1", "p2", stock)
    storage = FakeKeyValueStorage(stored)
    return CartStore(oracle, storage, on_item_added=on_item_added), oracle, storage


def _stored(storage: FakeKeyValueStorage) -> dict:
    return json.loads(storage.data[CART_STORAGE_KEY])


class TestAddToCart:

    def test_adds_and_persists(self):
        store, _, storage = _setup()
        store.add_to_cart("1", "p1", 2)
        assert store.quantity_of("1", "p1") == 2
        assert _stored(storage) == {
            "cart": [{"productId": "1", "packageOptionId": "p1", "quantity": 2}],
            "gifts": [],
        }

    def test_merges_repeated_adds(self):
        store, _, _ = _setup()
        store.add_to_cart("1", "p1", 2)
        store.add_to_cart("1", "p1", 3)
        assert store.quantity_of("1", "p1") == 5
        assert len(store.snapshot().lines) == 1

    def test_rejects_more_than_stock_counting_held_units(self):
        store, _, _ = _setup(stock=5)
        store.add_to_cart("1", "p1", 3)
        with pytest.raises(InsufficientStock, match="3 already in your cart"):
            store.add_to_cart("1", "p1", 3)
        assert store.quantity_of("1", "p1") == 3

    def test_unknown_variant(self):
        store, _, _ = _setup()
        with pytest.raises(ProductUnavailable):
            store.add_to_cart("9", "p1", 1)

    def test_inactive_variant(self):
        store, oracle, _ = _setup()
        oracle.set("1", "p1", 10, active=False)
        with pytest.raises(ProductUnavailable):
            store.add_to_cart("1", "p1", 1)

    @pytest.mark.parametrize("qty", [0, -1])
    def test_rejects_non_positive_quantity(self, qty):
        store, _, storage = _setup()
        with pytest.raises(InvalidQuantity):
            store.add_to_cart("1", "p1", qty)
        assert CART_STORAGE_KEY not in storage.data

    def test_notifies_listener_after_commit(self):
        added = []
        store, _, _ = _setup(on_item_added=added.append)
        store.add_to_cart("1", "p1", 1)
        store.add_to_cart("1", "p1", 1)
        assert [line.quantity.value for line in added] == [1, 2]

    def test_listener_not_called_on_rejection(self):
        added = []
        store, _, _ = _setup(stock=0, on_item_added=added.append)
        with pytest.raises(InsufficientStock):
            store.add_to_cart("1", "p1", 1)
        assert added == []

    def test_rejection_is_logged(self, caplog):
        store, _, _ = _setup(stock=0)
        with caplog.at_level(logging.INFO, logger="storefront"):
            with pytest.raises(InsufficientStock):
                store.add_to_cart("1", "p1", 1)
        assert "insufficient_stock" in caplog.text


class TestPersistThenAdopt:

    def test_failed_write_leaves_memory_unchanged(self):
        store, _, storage = _setup()
        store.add_to_cart("1", "p1", 1)
        storage.fail_writes = True
        with pytest.raises(StorageError):
            store.add_to_cart("1", "p1", 1)
        assert store.quantity_of("1", "p1") == 1
        assert _stored(storage)["cart"][0]["quantity"] == 1

    def test_failed_remove_keeps_line(self):
        store, _, storage = _setup()
        store.add_to_cart("1", "p1", 1)
        storage.fail_writes = True
        with pytest.raises(StorageError):
            store.remove_from_cart("1", "p1")
        assert store.quantity_of("1", "p1") == 1


class TestUpdateQuantity:

    def test_increase_checks_only_the_difference(self):
        store, _, _ = _setup(stock=5)
        store.add_to_cart("1", "p1", 3)
        store.update_quantity("1", "p1", 5)
        assert store.quantity_of("1", "p1") == 5

    def test_increase_beyond_stock_rejected(self):
        store, _, _ = _setup(stock=5)
        store.add_to_cart("1", "p1", 3)
        with pytest.raises(InsufficientStock):
            store.update_quantity("1", "p1", 6)
        assert store.quantity_of("1", "p1") == 3

    def test_decrease_skips_stock_check(self):
        store, oracle, _ = _setup(stock=5)
        store.add_to_cart("1", "p1", 4)
        oracle.set("1", "p1", 0)
        store.update_quantity("1", "p1", 2)
        assert store.quantity_of("1", "p1") == 2

    def test_zero_removes_line(self):
        store, _, storage = _setup()
        store.add_to_cart("1", "p1", 2)
        store.update_quantity("1", "p1", 0)
        assert store.snapshot().is_empty
        assert _stored(storage)["cart"] == []

    def test_missing_line(self):
        store, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found in cart"):
            store.update_quantity("1", "p1", 2)


class TestRemoveAndClear:

    def test_remove_only_matching_variant(self):
        store, _, _ = _setup()
        store.add_to_cart("1", "p1", 1)
        store.add_to_cart("1", "p2", 1)
        store.remove_from_cart("1", "p1")
        assert store.quantity_of("1", "p1") == 0
        assert store.quantity_of("1", "p2") == 1

    def test_clear_deletes_stored_cart(self):
        store, _, storage = _setup()
        store.add_to_cart("1", "p1", 1)
        store.clear_cart()
        assert store.snapshot().is_empty
        assert CART_STORAGE_KEY not in storage.data


class TestGifts:

    def test_add_and_replace_gift_by_id(self):
        store, _, storage = _setup()
        store.add_gift_to_cart(GiftLineItem("g1", "Honey jar", Money.of("5.00"), Quantity(1)))
        store.add_gift_to_cart(
            GiftLineItem("g1", "Honey jar", Money.of("5.00"), Quantity(2), {"name": "Eva"})
        )
        gifts = store.snapshot().gifts
        assert len(gifts) == 1
        assert gifts[0].quantity.value == 2
        assert _stored(storage)["gifts"] == [{
            "id": "g1",
            "name": "Honey jar",
            "price": "5.00",
            "currency": "EUR",
            "quantity": 2,
            "recipientDetails": {"name": "Eva"},
        }]

    def test_remove_gift(self):
        store, _, _ = _setup()
        store.add_gift_to_cart(GiftLineItem("g1", "Honey jar", Money.of("5.00"), Quantity(1)))
        store.remove_gift_from_cart("g1")
        assert store.snapshot().gifts == ()


class TestLoading:

    def test_restores_stored_cart(self):
        stored = {
            CART_STORAGE_KEY: json.dumps({
                "cart": [{"productId": "1", "packageOptionId": "p1", "quantity": 2}],
                "gifts": [{"id": "g1", "name": "Honey jar", "price": "5.00", "quantity": 1}],
            })
        }
        store, _, _ = _setup(stored=stored)
        assert store.quantity_of("1", "p1") == 2
        assert store.snapshot().gifts[0].price == Money.of("5.00")

    @pytest.mark.parametrize("raw", [
        "not json",
        "[]",
        json.dumps({"cart": [{"productId": "1"}]}),
        json.dumps({"cart": [{"productId": "1", "packageOptionId": "p1", "quantity": 0}]}),
        json.dumps({"gifts": [{"id": "g1", "name": "x", "price": "abc", "quantity": 1}]}),
    ])
    def test_malformed_cart_starts_empty(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="storefront"):
            store, _, _ = _setup(stored={CART_STORAGE_KEY: raw})
        assert store.snapshot().is_empty
        assert "malformed" in caplog.text
