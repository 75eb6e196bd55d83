"""
In-memory product store.

Used for development without a database and in tests. Filtering mirrors
the Supabase query semantics.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..common.config_loader import load_demo_products
from ..models import RECORD_FIELDS, Product, StoreResult
from .base import (
    DUPLICATE_HANDLE_ERROR,
    ProductStore,
    matches_filters,
    normalize_field,
    prepare_new_product,
)

logger = logging.getLogger(__name__)


class InMemoryProductStore(ProductStore):
    """
    Product store holding records in a dict keyed by id.

    Handles are only required to be unique for products created through
    create_product(); seeded products may lack one.

    Usage:
        store = InMemoryProductStore.with_demo_data()
        products = store.list_products(filters={"type": "Tea"})
    """

    def __init__(self, products: Optional[List[Product]] = None):
        self._products: Dict[Any, Product] = {}
        self._next_id = 1
        for product in products or []:
            self._insert(product)

    @classmethod
    def with_demo_data(cls) -> 'InMemoryProductStore':
        """Store seeded from config/demo_products.yaml."""
        return cls([Product.from_record(record) for record in load_demo_products()])

    def _insert(self, product: Product) -> Product:
        if product.id is None or product.id in self._products:
            product.id = self._next_id
        if isinstance(product.id, int):
            self._next_id = max(self._next_id, product.id + 1)
        self._products[product.id] = product
        return product

    def _find_by_handle(self, handle: str) -> Optional[Product]:
        for product in self._products.values():
            if handle and product.handle == handle:
                return product
        return None

    def list_products(self, search_term: str = '', filters: Optional[Dict[str, str]] = None) -> List[Product]:
        matching = [
            copy.deepcopy(product)
            for product in self._products.values()
            if matches_filters(product, search_term, filters)
        ]
        # Newest first; records without a timestamp keep insertion order
        matching.sort(key=lambda p: p.created_at or '', reverse=True)
        return matching

    def create_product(self, product: Product) -> StoreResult:
        try:
            prepare_new_product(product)
        except ValueError as e:
            return StoreResult(success=False, error=str(e))

        if self._find_by_handle(product.handle) is not None:
            return StoreResult(success=False, error=DUPLICATE_HANDLE_ERROR)

        now = datetime.now(timezone.utc).isoformat()
        product.created_at = product.created_at or now
        product.updated_at = now
        stored = self._insert(copy.deepcopy(product))

        logger.info("Created product %s", stored.handle)
        return StoreResult(success=True, data=[stored.to_record()])

    def update_product(self, product_id: Any, product: Product) -> StoreResult:
        existing = self._products.get(product_id)
        if existing is None:
            return StoreResult(success=False, error=f"Product {product_id} not found")

        if product.handle and product.handle != existing.handle:
            owner = self._find_by_handle(product.handle)
            if owner is not None and owner.id != product_id:
                return StoreResult(success=False, error=DUPLICATE_HANDLE_ERROR)

        changes = {name: value for name, value in vars(product).items()
                   if name in RECORD_FIELDS and name != 'id' and value is not None}
        for name, value in changes.items():
            setattr(existing, name, value)
        existing.updated_at = datetime.now(timezone.utc).isoformat()

        return StoreResult(success=True, data=[existing.to_record()])

    def delete_product(self, handle: str) -> StoreResult:
        doomed = [key for key, product in self._products.items() if product.handle == handle]
        if not doomed:
            logger.debug("Delete of unknown handle %s", handle)
        for key in doomed:
            del self._products[key]
        return StoreResult(success=True)

    def unique_values(self, field: str) -> List[str]:
        name = normalize_field(field)
        values = []
        for product in self._products.values():
            value = getattr(product, name)
            if value and value not in values:
                values.append(value)
        return values
