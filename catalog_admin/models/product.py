"""
Product data models.

Pure data classes for representing catalog product records.
No business logic - only data structure definitions and the mapping
between attribute names and the store's column names.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union


@dataclass
class ProductImage:
    """Product image with metadata."""
    source_url: str
    position: int
    alt_text: str = ""


# Store column name for every Product attribute. The store keeps the
# Shopify-style names (with spaces) and the "AI " provenance prefix.
RECORD_FIELDS: Dict[str, str] = {
    'id': 'id',
    'handle': 'Handle',
    'title': 'Title',
    'body_html': 'Body (HTML)',
    'vendor': 'Vendor',
    'product_type': 'Type',
    'product_category': 'AI Product Category',
    'tags': 'Tags',
    'published': 'Published',
    'status': 'Status',
    'sku': 'Variant SKU',
    'grams': 'Variant Grams',
    'inventory_qty': 'Variant Inventory Qty',
    'price': 'Variant Price',
    'compare_at_price': 'Variant Compare At Price',
    'cost_per_item': 'Cost per item',
    'image_urls': 'Image URLs',
    'image_src': 'Image Src',
    'image_position': 'Image Position',
    'image_alt_text': 'Image Alt Text',
    'seo_title': 'AI SEO Title',
    'seo_description': 'AI SEO Description',
    'benefits': 'AI Benefits',
    'detailed_ingredients': 'AI Detailed Ingredients',
    'certifications': 'AI Certifications',
    'age_group': 'AI Age Group',
    'dietary_preferences': 'AI Dietary Preferences',
    'flavor': 'AI Flavor',
    'serving_size': 'AI Serving Size',
    'servings_per_container': 'AI Servings Per Container',
    'how_to_use': 'AI How To Use',
    'warnings': 'AI Warnings',
    'created_at': 'created_at',
    'updated_at': 'updated_at',
}

COLUMN_TO_FIELD: Dict[str, str] = {column: name for name, column in RECORD_FIELDS.items()}


@dataclass
class Product:
    """
    A catalog product record.

    Every field is optional: records coming from the store or from a
    half-filled form may lack any of them. The exporter decides the
    fallbacks, so no defaults are substituted here.

    Field Groups:
    - Identity: handle, title
    - Merchandising: vendor, type, category, tags, published, status
    - Variant/pricing: sku, grams, inventory, price, compare-at price, cost
    - Images: image_urls (JSON list or decoded list) or the legacy
      image_src / image_alt_text pair
    - AI-derived: SEO fields and metafield sources
    """

    # Identity
    handle: Optional[str] = None
    title: Optional[str] = None

    # Merchandising
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    product_category: Optional[str] = None
    tags: Optional[str] = None
    published: Optional[bool] = None
    status: Optional[str] = None

    # Variant / pricing (strings or numbers, as stored)
    sku: Optional[str] = None
    grams: Any = None
    inventory_qty: Any = None
    price: Any = None
    compare_at_price: Any = None
    cost_per_item: Any = None

    # Content
    body_html: Optional[str] = None

    # Images
    image_urls: Union[str, List[str], None] = None
    image_src: Optional[str] = None
    image_position: Any = None
    image_alt_text: Optional[str] = None

    # AI-derived fields
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    benefits: Optional[str] = None
    detailed_ingredients: Optional[str] = None
    certifications: Optional[str] = None
    age_group: Optional[str] = None
    dietary_preferences: Optional[str] = None
    flavor: Optional[str] = None
    serving_size: Optional[str] = None
    servings_per_container: Optional[str] = None
    how_to_use: Optional[str] = None
    warnings: Optional[str] = None

    # Store bookkeeping
    id: Any = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Gallery assembled by the store when several rows share a handle
    images: List[ProductImage] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Product':
        """
        Build a Product from a store record keyed by column names.

        Attribute names are accepted as keys too. Unknown keys are ignored.
        """
        values = {}
        for key, value in record.items():
            name = COLUMN_TO_FIELD.get(key, key)
            if name in RECORD_FIELDS:
                values[name] = value
        return cls(**values)

    def to_record(self, include_empty: bool = False) -> Dict[str, Any]:
        """
        Convert to a store record keyed by column names.

        Args:
            include_empty: Keep columns whose value is None
        """
        record = {}
        for f in fields(self):
            if f.name not in RECORD_FIELDS:
                continue
            value = getattr(self, f.name)
            if value is None and not include_empty:
                continue
            record[RECORD_FIELDS[f.name]] = value
        return record
