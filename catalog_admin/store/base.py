"""
Product store interface and shared record preparation.

Concrete stores (Supabase, in-memory) implement ProductStore. Writes return
StoreResult instead of raising so callers can show the message as-is.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..common.text_utils import generate_handle, parse_number
from ..models import COLUMN_TO_FIELD, RECORD_FIELDS, Product, ProductImage, StoreResult

logger = logging.getLogger(__name__)

MAX_HANDLE_LENGTH = 250

# Filter values meaning "no filter" (the dashboard's select defaults)
ALL_VENDORS = 'all-vendors'
ALL_TYPES = 'all-types'
ALL_STATUS = 'all-status'

DUPLICATE_HANDLE_ERROR = 'A product with this handle already exists. Please use a different title.'

_FLOAT_FIELDS = ('price', 'compare_at_price', 'grams', 'cost_per_item')

# Substrings of database errors and the message shown instead
_FRIENDLY_ERRORS = [
    ('duplicate key', DUPLICATE_HANDLE_ERROR),
    ('violates not-null', 'Required fields are missing. Please check your input.'),
    ('violates check', 'Invalid data format. Please check your input values.'),
    ('invalid input syntax', 'Invalid data format. Please check numeric fields.'),
    ('string did not match', 'Invalid format in one of the fields. Please check your input.'),
]


class StoreError(Exception):
    """A backend request failed."""


def friendly_error(message: str) -> str:
    """Translate a database error message into user-facing text."""
    for needle, friendly in _FRIENDLY_ERRORS:
        if needle in message:
            return friendly
    return message


def normalize_field(name: str) -> str:
    """Return the Product attribute for a column or attribute name."""
    name = COLUMN_TO_FIELD.get(name, name)
    if name not in RECORD_FIELDS:
        raise ValueError(f"Unknown product field: {name}")
    return name


def prepare_new_product(product: Product) -> Product:
    """
    Normalize a product before insertion.

    - Handle from the title when missing (capped at 250 chars)
    - Title is required and trimmed
    - Local blob: image URLs are dropped
    - Image list stored as JSON text
    - Numeric fields parsed; empty values become None (quantity becomes 0)

    Raises:
        ValueError: If the title is empty
    """
    if not product.title or not product.title.strip():
        raise ValueError('Product title is required')

    if not product.handle:
        product.handle = generate_handle(product.title, max_length=MAX_HANDLE_LENGTH)

    product.title = product.title.strip()

    if product.image_src and product.image_src.startswith('blob:'):
        logger.warning("Removing blob URL from product data")
        product.image_src = None
        product.image_alt_text = None

    if isinstance(product.image_urls, (list, tuple)):
        product.image_urls = json.dumps(list(product.image_urls))

    for name in _FLOAT_FIELDS:
        setattr(product, name, _clean_float(getattr(product, name)))

    quantity = parse_number(product.inventory_qty)
    product.inventory_qty = int(quantity) if quantity is not None else 0

    position = parse_number(product.image_position)
    product.image_position = int(position) if position else None

    return product


def _clean_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    return parse_number(value) or None


def group_by_handle(records: Iterable[Dict[str, Any]]) -> List[Product]:
    """
    Collapse store rows sharing a Handle into one product.

    The first row supplies the fields; every row's Image Src joins the
    product's gallery. A gallery of several images becomes the product's
    image list when it has none of its own.
    """
    grouped: Dict[str, Product] = {}

    for record in records:
        product = Product.from_record(record)
        key = product.handle or f"id-{product.id}"

        if key not in grouped:
            grouped[key] = product
        if product.image_src:
            grouped[key].images.append(ProductImage(
                source_url=product.image_src,
                position=int(parse_number(product.image_position) or 1),
                alt_text=product.image_alt_text or '',
            ))

    for product in grouped.values():
        if not product.image_urls and len(product.images) > 1:
            product.image_urls = [image.source_url for image in product.images]

    return list(grouped.values())


def matches_filters(product: Product, search_term: str = '', filters: Optional[Dict[str, str]] = None) -> bool:
    """Client-side equivalent of the store query filters."""
    filters = filters or {}

    if search_term:
        needle = search_term.lower()
        haystacks = (product.title, product.handle, product.tags)
        if not any(needle in (text or '').lower() for text in haystacks):
            return False

    vendor = filters.get('vendor')
    if vendor and vendor != ALL_VENDORS and product.vendor != vendor:
        return False

    product_type = filters.get('type')
    if product_type and product_type != ALL_TYPES and product.product_type != product_type:
        return False

    published = filters.get('published')
    if published is not None and published != ALL_STATUS:
        if bool(product.published) != (str(published).lower() == 'true'):
            return False

    return True


class ProductStore(ABC):
    """CRUD over the products relation."""

    @abstractmethod
    def list_products(self, search_term: str = '', filters: Optional[Dict[str, str]] = None) -> List[Product]:
        """Products matching search and filters, newest first."""

    @abstractmethod
    def create_product(self, product: Product) -> StoreResult:
        """Insert a product; data is the stored record."""

    @abstractmethod
    def update_product(self, product_id: Any, product: Product) -> StoreResult:
        """Update the product with the given id."""

    @abstractmethod
    def delete_product(self, handle: str) -> StoreResult:
        """Delete all rows with the given handle."""

    @abstractmethod
    def unique_values(self, field: str) -> List[str]:
        """Distinct non-empty values of a field (e.g. 'Vendor', 'Type')."""
