"""Tests for the JSON-file-backed stores, against a temporary directory."""

import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from storefront.domain.exceptions import StorageError
from storefront.domain.model.checkout import GiftSelection
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.pricing import Totals
from storefront.domain.model.profile import Profile, ShippingAddress
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.persistence.json_discount_repository import JsonDiscountRepository
from storefront.infrastructure.persistence.json_file import read_json, write_json
from storefront.infrastructure.persistence.json_key_value_storage import JsonKeyValueStorage
from storefront.infrastructure.persistence.json_order_store import JsonOrderStore
from storefront.infrastructure.persistence.json_product_repository import (
    JsonGiftOptionRepository,
    JsonProductRepository,
)
from storefront.infrastructure.persistence.json_profile_store import JsonProfileStore
from tests.fakes import make_product

_ADDRESS = ShippingAddress("Glavna cesta 12", "Maribor", "2000", "Slovenija")


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _order(idempotency_key: str = "session-1", number: int = 1) -> Order:
    return Order.create(
        order_number=number,
        profile_id="profile-1",
        items=[
            OrderLineItem("1", "p1", "Pumpkin seed oil", "0.5 l", Quantity(2), Money.of("10.00")),
            OrderLineItem(
                "g1", "gift", "Honey jar", "Gift package: Honey jar", Quantity(1),
                Money.of("5.00"), is_gift=True, gift_details={"name": "Eva"},
            ),
        ],
        shipping_address=_ADDRESS,
        payment_method=PaymentMethod.CREDIT_CARD,
        totals=Totals(
            subtotal=Money.of("25.00"),
            discount_amount=Money.of("2.50"),
            subtotal_after_discount=Money.of("22.50"),
            shipping_cost=Money.of("3.90"),
            gift_option_cost=Money.of("3.50"),
            gift_product_cost=Money.zero(),
            total=Money.of("29.90"),
        ),
        is_guest=True,
        idempotency_key=idempotency_key,
        payment_reference="pi_1",
        discount_code="WELCOME10",
        gift=GiftSelection(gift_option_id="box", message="Enjoy"),
        notes="Ring twice",
    )


# ── File helpers ─────────────────────────────────────────────────


class TestJsonFile:

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        write_json(path, {"a": 1})
        assert read_json(path) == {"a": 1}

    def test_write_leaves_no_temp_files(self, tmp_path):
        write_json(tmp_path / "data.json", [1, 2, 3])
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(StorageError, match="Corrupt JSON"):
            read_json(path)

    def test_missing_file_raises_storage_error(self, tmp_path):
        with pytest.raises(StorageError, match="Cannot read"):
            read_json(tmp_path / "missing.json")

    def test_unwritable_location_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(StorageError, match="Cannot write"):
            write_json(blocker / "data.json", {})


# ── Catalog ──────────────────────────────────────────────────────


class TestJsonProductRepository:

    def test_loads_products_with_options(self, tmp_path):
        path = _write(tmp_path / "products.json", [{
            "id": 1,
            "name": "Hemp oil",
            "stock_quantity": 8,
            "package_options": [
                {"id": "p1", "description": "250 ml", "price": 12.5},
                {"id": "p2", "description": "500 ml", "price": "22.00", "is_active": False},
            ],
        }])
        product = JsonProductRepository(path).get_by_id("1")
        assert product.stock_quantity == 8
        assert product.package_option("p1").price == Money.of("12.50")
        assert not product.package_option("p2").is_active

    def test_save_and_reload(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(make_product("7", "Pumpkin seeds", stock=3, options=[("p1", "200 g", "3.00")]))
        reloaded = JsonProductRepository(tmp_path / "products.json").get_by_id("7")
        assert reloaded == make_product("7", "Pumpkin seeds", stock=3, options=[("p1", "200 g", "3.00")])

    def test_creates_empty_catalog(self, tmp_path):
        assert JsonProductRepository(tmp_path / "products.json").list_all() == []


class TestJsonGiftOptionRepository:

    def test_get_by_id(self, tmp_path):
        path = _write(tmp_path / "gift_options.json", [
            {"id": "box", "name": "Gift box", "price": "3.50"},
        ])
        repo = JsonGiftOptionRepository(path)
        assert repo.get_by_id("box").price == Money.of("3.50")
        assert repo.get_by_id("ribbon") is None


class TestJsonDiscountRepository:

    def test_lookup_and_parsing(self, tmp_path):
        path = _write(tmp_path / "discounts.json", [{
            "code": "minus5",
            "type": "fixed",
            "value": "5.00",
            "valid_from": "2025-01-01T00:00:00",
            "min_order_amount": "20.00",
            "max_uses": 100,
        }])
        discount = JsonDiscountRepository(path).get_by_code("MINUS5")
        assert discount.code == "MINUS5"
        assert discount.valid_from == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert discount.valid_until is None
        assert discount.min_order_amount == Money.of("20.00")
        assert discount.max_uses == 100

    def test_missing_valid_from_means_always_started(self, tmp_path):
        path = _write(tmp_path / "discounts.json", [{"code": "X", "type": "percentage", "value": 5}])
        assert JsonDiscountRepository(path).get_by_code("X").valid_from.year == 1970

    def test_unknown_code(self, tmp_path):
        assert JsonDiscountRepository(tmp_path / "discounts.json").get_by_code("NOPE") is None


# ── Profiles and orders ──────────────────────────────────────────


class TestJsonProfileStore:

    def test_upsert_and_find(self, tmp_path):
        store = JsonProfileStore(tmp_path / "profiles.json")
        profile = Profile("p-1", "Ana@Example.si", "Ana Novak", "041 123 456", _ADDRESS)
        store.upsert(profile)
        assert store.find_by_user_id("p-1") == profile
        assert store.find_by_email(" ana@example.SI ") == profile

    def test_upsert_replaces_existing(self, tmp_path):
        store = JsonProfileStore(tmp_path / "profiles.json")
        store.upsert(Profile("p-1", "ana@example.si"))
        store.upsert(Profile("p-1", "ana@example.si", full_name="Ana Novak"))
        assert len(read_json(tmp_path / "profiles.json")) == 1
        assert store.find_by_user_id("p-1").default_shipping_address is None
        assert store.find_by_user_id("p-1").full_name == "Ana Novak"


class TestJsonOrderStore:

    def test_order_numbers_increase_across_instances(self, tmp_path):
        path = tmp_path / "orders.json"
        assert JsonOrderStore(path).next_order_number() == 1
        assert JsonOrderStore(path).next_order_number() == 2

    def test_insert_and_reload(self, tmp_path):
        store = JsonOrderStore(tmp_path / "orders.json")
        order = _order()
        inserted = store.insert(order)
        assert inserted.order_number == 1
        assert store.get_by_number(1) == replace(order, id=inserted.id)

    def test_insert_is_idempotent_per_key(self, tmp_path):
        store = JsonOrderStore(tmp_path / "orders.json")
        first = store.insert(_order("session-1", 1))
        again = store.insert(_order("session-1", 2))
        assert again == first
        assert len(store.list_all()) == 1

    def test_unknown_number(self, tmp_path):
        assert JsonOrderStore(tmp_path / "orders.json").get_by_number(9) is None


class TestJsonKeyValueStorage:

    def test_set_get_delete(self, tmp_path):
        storage = JsonKeyValueStorage(tmp_path / "storage.json")
        storage.set("storefront_cart", '{"cart": []}')
        assert JsonKeyValueStorage(tmp_path / "storage.json").get("storefront_cart") == '{"cart": []}'
        storage.delete("storefront_cart")
        assert storage.get("storefront_cart") is None

    def test_delete_missing_key_is_a_no_op(self, tmp_path):
        storage = JsonKeyValueStorage(tmp_path / "storage.json")
        storage.delete("nothing")
        assert read_json(tmp_path / "storage.json") == {}
