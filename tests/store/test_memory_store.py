"""Tests for catalog_admin/store/memory_store.py"""

import pytest

from catalog_admin.models import Product
from catalog_admin.store import InMemoryProductStore
from catalog_admin.store.base import group_by_handle


@pytest.fixture
def store(store_records):
    return InMemoryProductStore(group_by_handle(store_records))


class TestListProducts:
    def test_newest_first(self, store):
        assert [p.handle for p in store.list_products()] == ["organic-green-tea", "chamomile-tea"]

    def test_filters(self, store):
        assert [p.handle for p in store.list_products(filters={"published": "false"})] == ["chamomile-tea"]
        assert store.list_products("chamomile")[0].title == "Chamomile Relaxation Tea"
        assert store.list_products(filters={"vendor": "GNC"}) == []

    def test_returns_copies(self, store):
        store.list_products()[0].title = "Changed"
        assert store.list_products()[0].title == "Organic Green Tea Blend"

    def test_demo_data(self):
        store = InMemoryProductStore.with_demo_data()
        products = store.list_products()
        assert len(products) >= 5
        assert all(p.vendor == "GNC" for p in store.list_products(filters={"vendor": "GNC"}))


class TestCreateProduct:
    def test_assigns_id_and_handle(self, store):
        result = store.create_product(Product(title="Lemon Balm Tea", vendor="Harney & Sons"))
        assert result.success
        record = result.data[0]
        assert record["Handle"] == "lemon-balm-tea"
        assert record["id"] == 4
        assert record["created_at"]

    def test_duplicate_handle(self, store):
        result = store.create_product(Product(title="Chamomile Tea", handle="chamomile-tea"))
        assert result.success is False
        assert result.error == "A product with this handle already exists. Please use a different title."

    def test_missing_title(self, store):
        result = store.create_product(Product(vendor="GNC"))
        assert result.success is False
        assert result.error == "Product title is required"


class TestUpdateProduct:
    def test_applies_changes(self, store):
        result = store.update_product(3, Product(price="12.00"))
        assert result.success
        assert result.data[0]["Variant Price"] == "12.00"
        assert result.data[0]["Title"] == "Chamomile Relaxation Tea"

    def test_handle_change_rekeys(self, store):
        store.update_product(3, Product(handle="chamomile-calm"))
        handles = {p.handle for p in store.list_products()}
        assert handles == {"organic-green-tea", "chamomile-calm"}

    def test_unknown_id(self, store):
        assert store.update_product(99, Product(title="X")).success is False


class TestDeleteAndUniqueValues:
    def test_delete(self, store):
        assert store.delete_product("chamomile-tea").success
        assert [p.handle for p in store.list_products()] == ["organic-green-tea"]

    def test_delete_unknown_handle_succeeds(self, store):
        assert store.delete_product("missing").success

    def test_unique_values(self, store):
        assert store.unique_values("Vendor") == ["Harney & Sons"]
        assert store.unique_values("Type") == ["Tea"]


class TestProductsWithoutHandle:
    def test_all_handle_less_products_kept(self):
        store = InMemoryProductStore([
            Product(title="Green Tea", vendor="Harney"),
            Product(title="Omega 3", vendor="GNC"),
            Product(sku="ORPHAN"),
        ])
        products = store.list_products()
        assert [p.title for p in products] == ["Green Tea", "Omega 3", None]
        assert [p.id for p in products] == [1, 2, 3]

    def test_identity_less_record_reaches_export_gate(self, exporter):
        from catalog_admin.shopify import ValidationError

        store = InMemoryProductStore([Product(sku="ORPHAN"), Product(title="Green Tea")])
        with pytest.raises(ValidationError):
            exporter.export(store.list_products())

    def test_repeated_ids_renumbered(self):
        store = InMemoryProductStore([Product(title="A", id=1), Product(title="B", id=1)])
        assert sorted(p.id for p in store.list_products()) == [1, 2]

    def test_delete_removes_every_row_with_handle(self):
        store = InMemoryProductStore([Product(title="A", handle="tea"), Product(title="B", handle="tea")])
        store.delete_product("tea")
        assert store.list_products() == []


class TestUpdateHandleConflict:
    def test_taken_handle_rejected(self):
        store = InMemoryProductStore([Product(title="A", handle="a"), Product(title="B", handle="b")])
        result = store.update_product(1, Product(handle="b"))
        assert result.success is False
        assert result.error == "A product with this handle already exists. Please use a different title."
        assert sorted(p.handle for p in store.list_products()) == ["a", "b"]

    def test_same_handle_allowed(self):
        store = InMemoryProductStore([Product(title="A", handle="a")])
        assert store.update_product(1, Product(handle="a", title="A2")).success
