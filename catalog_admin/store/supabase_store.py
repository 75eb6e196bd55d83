"""
Supabase Product Store

Product CRUD against a Supabase table through its PostgREST endpoint.
Handles authentication headers, retries on transient errors and
translation of database errors into user-facing messages.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import requests

from ..models import RECORD_FIELDS, Product, StoreResult
from .base import (
    ALL_STATUS,
    ALL_TYPES,
    ALL_VENDORS,
    ProductStore,
    StoreError,
    friendly_error,
    group_by_handle,
    normalize_field,
    prepare_new_product,
)

logger = logging.getLogger(__name__)

Params = Union[Dict[str, str], Sequence[Tuple[str, str]], None]


class SupabaseProductStore(ProductStore):
    """
    Product store backed by a Supabase (PostgREST) table.

    Usage:
        store = SupabaseProductStore(url="https://xyz.supabase.co", api_key="...")
        products = store.list_products("tea", {"vendor": "Harney & Sons"})
        result = store.create_product(Product(title="Green Tea", vendor="Harney"))
    """

    DEFAULT_TABLE = "shopify_products_complete"
    MAX_RETRIES = 3
    RETRYABLE_STATUS_CODES = {429, 502, 503, 504}

    def __init__(self, url: str, api_key: str, table: str = DEFAULT_TABLE, timeout: int = 30):
        """
        Initialize the store.

        Args:
            url: Supabase project URL (https://<ref>.supabase.co)
            api_key: Service role or anon key
            table: Products table name
            timeout: Request timeout in seconds
        """
        if not url.startswith("https://"):
            raise ValueError(f"Supabase URL must start with https:// (got {url!r})")

        self.base_url = url.rstrip("/")
        self.table = table
        self.table_url = f"{self.base_url}/rest/v1/{table}"
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        })

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def _request(self, method: str, params: Params = None, json: Any = None) -> Any:
        """
        Send a request to the products table.

        Returns:
            Decoded JSON body (None for empty responses)

        Raises:
            StoreError: On HTTP errors, timeouts or connection failures
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                response = self.session.request(
                    method, self.table_url, params=params, json=json, timeout=self.timeout
                )
            except requests.exceptions.Timeout as e:
                raise StoreError(f"Request timeout: {method} {self.table}") from e
            except requests.exceptions.RequestException as e:
                raise StoreError(f"Request failed: {e}") from e

            if response.status_code in self.RETRYABLE_STATUS_CODES:
                retry_after = int(response.headers.get("Retry-After", 2 ** attempt))
                logger.warning("HTTP %d on %s, retry %d/%d in %ds...",
                               response.status_code, self.table, attempt + 1,
                               self.MAX_RETRIES, retry_after)
                time.sleep(retry_after)
                continue

            if response.status_code >= 400:
                raise StoreError(self._error_message(response))

            if not response.content:
                return None
            return response.json()

        raise StoreError(f"Giving up on {method} {self.table} after {self.MAX_RETRIES} attempts")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return response.text[:200]

    def list_products(self, search_term: str = '', filters: Optional[Dict[str, str]] = None) -> List[Product]:
        filters = filters or {}
        params: List[Tuple[str, str]] = [("select", "*"), ("order", "created_at.desc")]

        if search_term:
            pattern = f"*{search_term}*"
            params.append((
                "or",
                f"(Title.ilike.{pattern},Handle.ilike.{pattern},Tags.ilike.{pattern})",
            ))

        vendor = filters.get('vendor')
        if vendor and vendor != ALL_VENDORS:
            params.append(("Vendor", f"eq.{vendor}"))

        product_type = filters.get('type')
        if product_type and product_type != ALL_TYPES:
            params.append(("Type", f"eq.{product_type}"))

        published = filters.get('published')
        if published is not None and published != ALL_STATUS:
            is_published = str(published).lower() == "true"
            params.append(("Published", "eq.true" if is_published else "eq.false"))

        try:
            records = self._request("GET", params=params) or []
        except StoreError as e:
            logger.error("Error fetching products: %s", e)
            return []

        return group_by_handle(records)

    def create_product(self, product: Product) -> StoreResult:
        try:
            prepare_new_product(product)
        except ValueError as e:
            return StoreResult(success=False, error=str(e))

        now = datetime.now(timezone.utc).isoformat()
        record = product.to_record()
        record.pop("id", None)
        record.setdefault("created_at", now)
        record["updated_at"] = now

        try:
            data = self._request("POST", json=[record])
        except StoreError as e:
            logger.error("Supabase insert error: %s", e)
            return StoreResult(success=False, error=friendly_error(str(e)))

        logger.info("Created product %s", product.handle)
        return StoreResult(success=True, data=data)

    def update_product(self, product_id: Any, product: Product) -> StoreResult:
        record = product.to_record()
        record.pop("id", None)
        record["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            data = self._request("PATCH", params={"id": f"eq.{product_id}"}, json=record)
        except StoreError as e:
            logger.error("Error updating product %s: %s", product_id, e)
            return StoreResult(success=False, error=friendly_error(str(e)))

        return StoreResult(success=True, data=data)

    def delete_product(self, handle: str) -> StoreResult:
        try:
            self._request("DELETE", params={"Handle": f"eq.{handle}"})
        except StoreError as e:
            logger.error("Error deleting product %s: %s", handle, e)
            return StoreResult(success=False, error=str(e))

        logger.info("Deleted product %s", handle)
        return StoreResult(success=True)

    def unique_values(self, field: str) -> List[str]:
        column = RECORD_FIELDS[normalize_field(field)]
        params = [
            ("select", f'"{column}"'),
            (column, "not.is.null"),
            (column, "neq."),
        ]

        try:
            records = self._request("GET", params=params) or []
        except StoreError as e:
            logger.warning("Error fetching unique values for %s: %s", column, e)
            return []

        values = []
        for record in records:
            value = record.get(column)
            if value and value not in values:
                values.append(value)
        return values
