"""Tests for catalog_admin/store/supabase_store.py"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from catalog_admin.models import Product
from catalog_admin.store import StoreError, SupabaseProductStore


def _response(status=200, body=None, headers=None):
    response = MagicMock()
    response.status_code = status
    response.headers = headers or {}
    response.content = json.dumps(body).encode() if body is not None else b""
    response.text = json.dumps(body) if body is not None else ""
    response.json.return_value = body
    return response


@pytest.fixture
def store():
    return SupabaseProductStore(url="https://demo.supabase.co/", api_key="service-key")


class TestInit:
    def test_urls_and_headers(self, store):
        assert store.table_url == "https://demo.supabase.co/rest/v1/shopify_products_complete"
        assert store.session.headers["apikey"] == "service-key"
        assert store.session.headers["Authorization"] == "Bearer service-key"
        assert store.session.headers["Prefer"] == "return=representation"

    def test_requires_https(self):
        with pytest.raises(ValueError, match="https"):
            SupabaseProductStore(url="http://demo.supabase.co", api_key="key")

    def test_context_manager(self):
        with SupabaseProductStore(url="https://demo.supabase.co", api_key="key") as store:
            assert store.table == "shopify_products_complete"


class TestRequest:
    def test_returns_json(self, store):
        with patch.object(store.session, "request", return_value=_response(body=[{"id": 1}])) as mock:
            assert store._request("GET", params={"select": "*"}) == [{"id": 1}]
        args, kwargs = mock.call_args
        assert args == ("GET", store.table_url)
        assert kwargs["timeout"] == 30

    def test_empty_body(self, store):
        with patch.object(store.session, "request", return_value=_response(status=204)):
            assert store._request("DELETE") is None

    def test_error_message_from_body(self, store):
        response = _response(status=400, body={"message": "invalid input syntax for type numeric"})
        with patch.object(store.session, "request", return_value=response):
            with pytest.raises(StoreError, match="invalid input syntax"):
                store._request("POST", json=[{}])

    @patch("catalog_admin.store.supabase_store.time.sleep")
    def test_retries_transient_errors(self, mock_sleep, store):
        responses = [_response(status=503), _response(body=[])]
        with patch.object(store.session, "request", side_effect=responses) as mock:
            assert store._request("GET") == []
        assert mock.call_count == 2
        mock_sleep.assert_called_once_with(1)

    @patch("catalog_admin.store.supabase_store.time.sleep")
    def test_retry_after_header(self, mock_sleep, store):
        responses = [_response(status=429, headers={"Retry-After": "5"}), _response(body=[])]
        with patch.object(store.session, "request", side_effect=responses):
            store._request("GET")
        mock_sleep.assert_called_once_with(5)

    @patch("catalog_admin.store.supabase_store.time.sleep")
    def test_gives_up(self, mock_sleep, store):
        with patch.object(store.session, "request", return_value=_response(status=502)):
            with pytest.raises(StoreError, match="Giving up"):
                store._request("GET")
        assert mock_sleep.call_count == 3

    def test_timeout(self, store):
        with patch.object(store.session, "request", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(StoreError, match="timeout"):
                store._request("GET")

    def test_connection_error(self, store):
        with patch.object(store.session, "request", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(StoreError, match="refused"):
                store._request("GET")


class TestListProducts:
    def test_query_params(self, store):
        with patch.object(store, "_request", return_value=[]) as mock:
            store.list_products("tea", {"vendor": "Harney & Sons", "type": "Tea", "published": "false"})
        params = mock.call_args.kwargs["params"]
        assert ("order", "created_at.desc") in params
        assert ("or", "(Title.ilike.*tea*,Handle.ilike.*tea*,Tags.ilike.*tea*)") in params
        assert ("Vendor", "eq.Harney & Sons") in params
        assert ("Type", "eq.Tea") in params
        assert ("Published", "eq.false") in params

    def test_all_values_add_no_filters(self, store):
        filters = {"vendor": "all-vendors", "type": "all-types", "published": "all-status"}
        with patch.object(store, "_request", return_value=[]) as mock:
            store.list_products("", filters)
        assert mock.call_args.kwargs["params"] == [("select", "*"), ("order", "created_at.desc")]

    def test_groups_rows(self, store, store_records):
        with patch.object(store, "_request", return_value=store_records):
            products = store.list_products()
        assert [p.handle for p in products] == ["organic-green-tea", "chamomile-tea"]
        assert len(products[0].image_urls) == 2

    def test_error_returns_empty_list(self, store):
        with patch.object(store, "_request", side_effect=StoreError("boom")):
            assert store.list_products() == []


class TestWrites:
    def test_create_sends_prepared_record(self, store):
        with patch.object(store, "_request", return_value=[{"id": 7}]) as mock:
            result = store.create_product(Product(title=" Green Tea ", price="9.99", id=99))
        assert result.success
        assert result.data == [{"id": 7}]
        record = mock.call_args.kwargs["json"][0]
        assert record["Handle"] == "green-tea"
        assert record["Title"] == "Green Tea"
        assert record["Variant Price"] == 9.99
        assert record["Variant Inventory Qty"] == 0
        assert "id" not in record
        assert record["created_at"] and record["updated_at"]

    def test_create_duplicate_handle(self, store):
        error = StoreError('duplicate key value violates unique constraint "handle_key"')
        with patch.object(store, "_request", side_effect=error):
            result = store.create_product(Product(title="Green Tea"))
        assert result.success is False
        assert result.error == "A product with this handle already exists. Please use a different title."

    def test_create_without_title_skips_request(self, store):
        with patch.object(store, "_request") as mock:
            result = store.create_product(Product(vendor="GNC"))
        assert result.success is False
        mock.assert_not_called()

    def test_update(self, store):
        with patch.object(store, "_request", return_value=[{"id": 3}]) as mock:
            result = store.update_product(3, Product(title="Chamomile", id=3))
        assert result.success
        args, kwargs = mock.call_args
        assert args == ("PATCH",)
        assert kwargs["params"] == {"id": "eq.3"}
        assert "id" not in kwargs["json"]

    def test_delete(self, store):
        with patch.object(store, "_request", return_value=None) as mock:
            assert store.delete_product("green-tea").success
        assert mock.call_args.kwargs["params"] == {"Handle": "eq.green-tea"}

    def test_delete_error(self, store):
        with patch.object(store, "_request", side_effect=StoreError("permission denied")):
            result = store.delete_product("green-tea")
        assert result.success is False
        assert result.error == "permission denied"


class TestUniqueValues:
    def test_distinct_values(self, store):
        rows = [{"Vendor": "GNC"}, {"Vendor": "Harney & Sons"}, {"Vendor": "GNC"}, {"Vendor": ""}]
        with patch.object(store, "_request", return_value=rows) as mock:
            assert store.unique_values("Vendor") == ["GNC", "Harney & Sons"]
        params = mock.call_args.kwargs["params"]
        assert ("select", '"Vendor"') in params
        assert ("Vendor", "not.is.null") in params

    def test_attribute_name_maps_to_column(self, store):
        with patch.object(store, "_request", return_value=[{"Type": "Tea"}]):
            assert store.unique_values("product_type") == ["Tea"]

    def test_error_returns_empty(self, store):
        with patch.object(store, "_request", side_effect=StoreError("boom")):
            assert store.unique_values("Vendor") == []
